"""
Contract Deployment
One-shot deployment of a compiled contract from an HD wallet mnemonic

Configured through environment variables (or a .env file):
    DEPLOY_MNEMONIC, DEPLOY_NETWORK, DEPLOY_ARTIFACT
"""

import asyncio
import sys
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

from deployer.artifact import CompiledArtifact
from deployer.config import load_settings, read_mnemonic
from deployer.credentials import Credentials
from deployer.errors import DeployError, TransactionError
from deployer.orchestrator import deploy

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Console sink on stderr (stdout carries only the address), optional file sink"""
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            format=FILE_FORMAT,
            level="DEBUG"
        )


def main() -> int:
    """
    Run one deployment

    Returns:
        Process exit status: 0 on success, the error's exit code otherwise
    """
    load_dotenv()

    try:
        settings = load_settings()
        configure_logging(settings.log_level, settings.log_file)

        logger.info("=" * 70)
        logger.info("Contract Deployment")
        logger.info("=" * 70)

        artifact = CompiledArtifact.from_file(settings.artifact_path, settings.contract_name)

        with Credentials(read_mnemonic(), settings.network, settings.address_index) as credentials:
            result = asyncio.run(
                deploy(
                    credentials,
                    artifact,
                    settings.constructor_args,
                    **settings.orchestrator_options()
                )
            )

    except DeployError as e:
        logger.error(f"Deployment failed {e}")
        if isinstance(e, TransactionError) and e.tx_hash:
            logger.error(f"Transaction hash: {e.tx_hash}")
        return e.exit_code
    except KeyboardInterrupt:
        logger.warning("Deployment interrupted")
        return 130
    except Exception:
        logger.exception("Unexpected error during deployment")
        return 1

    logger.success(f"Contract address: {result.contract_address}")
    logger.success(f"Transaction hash: {result.transaction_hash}")
    print(result.contract_address)
    return 0


if __name__ == "__main__":
    sys.exit(main())
