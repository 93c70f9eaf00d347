"""
Compiled Artifact
Interface (ABI) + bytecode pair produced by the contract compiler
"""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from eth_abi.exceptions import EncodingError
from loguru import logger
from web3 import Web3
from web3.exceptions import Web3Exception

from .errors import ArtifactError

# solc leaves `__$<hash>$__` (or `__LibName____`) where a library address
# has to be linked in before deployment
_LINK_PLACEHOLDER = re.compile(r'__\$[0-9a-fA-F]{34}\$__|__[A-Za-z0-9_.:/]{2,36}__')
_NON_HEX = re.compile(r'[^0-9a-fA-F]')


@dataclass(frozen=True)
class CompiledArtifact:
    """
    Immutable compiled contract

    Attributes:
        abi: ABI entries describing the contract's callable surface
        bytecode: creation bytecode, 0x-prefixed hex
        contract_name: optional name, only used for logging
    """

    abi: Tuple[Dict[str, Any], ...]
    bytecode: str
    contract_name: Optional[str] = None

    @classmethod
    def create(
        cls,
        interface: Union[str, Sequence[Dict[str, Any]], None],
        bytecode: Union[str, bytes, None],
        contract_name: Optional[str] = None
    ) -> 'CompiledArtifact':
        """
        Validate and build an artifact

        Args:
            interface: ABI list, or the JSON string solc emits as `interface`
            bytecode: creation bytecode as hex string (with or without 0x) or raw bytes
            contract_name: optional contract name

        Returns:
            CompiledArtifact

        Raises:
            ArtifactError: if the interface or bytecode is missing or malformed
        """
        abi = _parse_interface(interface)
        code = _normalize_bytecode(bytecode)
        return cls(abi=tuple(abi), bytecode=code, contract_name=contract_name)

    @classmethod
    def from_file(cls, path: Union[str, Path], contract_name: Optional[str] = None) -> 'CompiledArtifact':
        """
        Load an artifact JSON file

        Understands Hardhat/Truffle/Foundry artifacts, solc-js legacy output
        (`interface` + `bytecode`) and solc standard-json output, with or
        without the surrounding `contracts` mapping.

        Args:
            path: artifact file path
            contract_name: which contract to pick when the file holds several

        Returns:
            CompiledArtifact
        """
        path = Path(path)

        if not path.is_file():
            raise ArtifactError("Contract artifact not found", reason=str(path))

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise ArtifactError("Cannot read contract artifact", reason=f"{path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ArtifactError("Contract artifact is not valid JSON", reason=f"{path}: {e}") from e

        name, entry = _select_contract(data, contract_name)

        if 'abi' in entry:
            interface = entry['abi']
        else:
            interface = entry.get('interface')

        bytecode = entry.get('bytecode')
        if bytecode is None:
            bytecode = entry.get('evm', {}).get('bytecode')
        if isinstance(bytecode, dict):
            bytecode = bytecode.get('object')

        name = name or entry.get('contractName') or contract_name
        artifact = cls.create(interface, bytecode, contract_name=name)

        logger.debug(f"Loaded artifact {name or path.name} ({artifact.size} bytes)")
        return artifact

    @property
    def size(self) -> int:
        """Creation bytecode size in bytes"""
        return (len(self.bytecode) - 2) // 2

    @property
    def constructor_inputs(self) -> List[Dict[str, Any]]:
        for entry in self.abi:
            if entry.get('type') == 'constructor':
                return list(entry.get('inputs', []))
        return []

    @property
    def constructor_payable(self) -> bool:
        for entry in self.abi:
            if entry.get('type') == 'constructor':
                return entry.get('stateMutability') == 'payable' or bool(entry.get('payable'))
        return False

    def creation_data(self, constructor_args: Sequence[Any] = ()) -> str:
        """
        Build the `data` field of the contract-creation transaction

        Args:
            constructor_args: constructor arguments in ABI order

        Returns:
            0x-prefixed hex: bytecode followed by the ABI-encoded arguments

        Raises:
            ArtifactError: on wrong arity or unencodable arguments
        """
        args = list(constructor_args or ())

        # Web3 without a reachable provider: encoding is offline
        try:
            factory = Web3().eth.contract(abi=list(self.abi), bytecode=self.bytecode)
            constructor = factory.constructor(*args)
        except (Web3Exception, EncodingError, TypeError, ValueError, OverflowError) as e:
            raise ArtifactError(
                "Cannot encode constructor arguments",
                reason=f"{len(args)} given for {len(self.constructor_inputs)} inputs: {e}"
            ) from e

        return Web3.to_hex(hexstr=constructor.data_in_transaction)


def _select_contract(data: Any, contract_name: Optional[str]) -> Tuple[Optional[str], Dict[str, Any]]:
    """Pick one contract entry out of a compiler output document"""
    if not isinstance(data, dict):
        raise ArtifactError("Contract artifact must be a JSON object")

    contracts = data.get('contracts')
    if not isinstance(contracts, dict):
        return data.get('contractName'), data

    # solc-js legacy: {":Name": {...}}; standard-json: {"file.sol": {"Name": {...}}}
    flat = {}
    for key, value in contracts.items():
        if not isinstance(value, dict):
            continue
        if 'bytecode' in value or 'evm' in value or 'interface' in value or 'abi' in value:
            flat[key.split(':')[-1]] = value
        else:
            for name, entry in value.items():
                if isinstance(entry, dict):
                    flat[name] = entry

    if not flat:
        raise ArtifactError("Compiler output contains no contracts")

    if contract_name:
        if contract_name not in flat:
            raise ArtifactError(
                "Contract not found in compiler output",
                reason=f"{contract_name} (available: {', '.join(sorted(flat))})"
            )
        return contract_name, flat[contract_name]

    if len(flat) > 1:
        raise ArtifactError(
            "Compiler output holds several contracts, a contract name is required",
            reason=', '.join(sorted(flat))
        )

    return next(iter(flat.items()))


def _parse_interface(interface: Any) -> List[Dict[str, Any]]:
    if interface is None:
        raise ArtifactError("Contract interface (ABI) is missing")

    if isinstance(interface, str):
        try:
            interface = json.loads(interface)
        except json.JSONDecodeError as e:
            raise ArtifactError("Contract interface is not valid JSON", reason=str(e)) from e

    if not isinstance(interface, (list, tuple)):
        raise ArtifactError(
            "Contract interface must be a list of ABI entries",
            reason=type(interface).__name__
        )

    abi = []
    for entry in interface:
        if not isinstance(entry, dict):
            raise ArtifactError("Malformed ABI entry", reason=repr(entry)[:80])
        # `type` may be omitted and then defaults to "function"
        abi.append(entry if 'type' in entry else dict(entry, type='function'))

    return abi


def _normalize_bytecode(bytecode: Any) -> str:
    if bytecode is None:
        raise ArtifactError("Contract bytecode is missing")

    if isinstance(bytecode, (bytes, bytearray)):
        bytecode = bytes(bytecode).hex()

    if not isinstance(bytecode, str):
        raise ArtifactError("Contract bytecode must be a hex string", reason=type(bytecode).__name__)

    code = bytecode.strip()
    if code[:2].lower() == '0x':
        code = code[2:]

    if not code:
        raise ArtifactError("Contract bytecode is empty")

    if _LINK_PLACEHOLDER.search(code):
        raise ArtifactError("Contract bytecode has unlinked library references")

    bad = _NON_HEX.search(code)
    if bad:
        raise ArtifactError(
            "Contract bytecode is not valid hex",
            reason=f"{bad.group()!r} at position {bad.start()}"
        )

    if len(code) % 2:
        raise ArtifactError("Contract bytecode has odd length", reason=f"{len(code)} hex digits")

    return '0x' + code.lower()
