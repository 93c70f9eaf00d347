"""
Deployment Constants
Known networks, HD wallet derivation and gas defaults
"""

ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'

# BIP-44 path used by HD wallet providers, account index appended
DERIVATION_PATH_PREFIX = "m/44'/60'/0'/0"

VALID_MNEMONIC_WORD_COUNTS = (12, 15, 18, 21, 24)

# Symbolic network names. The RPC URL is read from `rpc_url_env`,
# falling back to `default_rpc_url` where one exists.
NETWORKS = {
    'mainnet': {
        'chain_id': 1,
        'rpc_url_env': 'MAINNET_RPC_URL',
        'default_rpc_url': None
    },
    'sepolia': {
        'chain_id': 11155111,
        'rpc_url_env': 'SEPOLIA_RPC_URL',
        'default_rpc_url': None
    },
    'holesky': {
        'chain_id': 17000,
        'rpc_url_env': 'HOLESKY_RPC_URL',
        'default_rpc_url': None
    },
    'polygon': {
        'chain_id': 137,
        'rpc_url_env': 'POLYGON_RPC_URL',
        'default_rpc_url': None
    },
    'amoy': {
        'chain_id': 80002,
        'rpc_url_env': 'AMOY_RPC_URL',
        'default_rpc_url': None
    },
    'development': {
        'chain_id': None,
        'rpc_url_env': 'DEVELOPMENT_RPC_URL',
        'default_rpc_url': 'http://127.0.0.1:8545'
    },
}

NETWORK_ALIASES = {
    'ethereum': 'mainnet',
    'localhost': 'development',
    'local': 'development',
    'matic': 'polygon',
}

# Gas
GAS_ESTIMATE_BUFFER = 1.2  # 20% over the node's estimate
DEFAULT_PRIORITY_FEE_GWEI = 1.5

# Timeouts (seconds)
DEFAULT_RECEIPT_TIMEOUT = 300
DEFAULT_RECEIPT_POLL_INTERVAL = 0.5
DEFAULT_RPC_TIMEOUT = 30
