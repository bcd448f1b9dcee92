from pathlib import Path

import ibc_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(ibc_deployment.__file__).parent
PROJECT_ROOT = DEPLOYMENT_DIR.parent
NETWORK_PARAMS_DIR = DEPLOYMENT_DIR / "network_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"
CONFIG_DIR = PROJECT_ROOT / "config"

LEDGER_FILE_SUFFIX = ".env.sh"

#
# Networks
#

CHAIN0 = "chain0"
CHAIN1 = "chain1"

SUPPORTED_NETWORKS = [CHAIN0, CHAIN1]

# ape's ephemeral in-process network
LOCAL_NETWORKS = ["local"]

#
# Remote attestation
#

SGX_MODE_ENVVAR = "SGX_MODE"
SGX_MODE_SIMULATION = "SW"
SGX_MODE_HARDWARE = "HW"
SGX_MODES = [SGX_MODE_SIMULATION, SGX_MODE_HARDWARE]

SIMULATION_ROOT_CERT_FILENAME = "simulation_rootca.der"
PRODUCTION_ROOT_CERT_FILENAME = "Intel_SGX_Attestation_RootCA.der"

#
# Contracts
#

# Order matters: OwnableIBCHandler takes the logic addresses positionally.
IBC_LOGIC_MODULES = (
    "IBCClient",
    "IBCConnectionSelfStateNoValidation",
    "IBCChannelHandshake",
    "IBCChannelPacketSendRecv",
    "IBCChannelPacketTimeout",
    "IBCChannelUpgradeInitTryAck",
    "IBCChannelUpgradeConfirmOpenTimeoutCancel",
)

IBC_HANDLER = "OwnableIBCHandler"
LCP_PROTO_MARSHALER = "LCPProtoMarshaler"
AVR_VALIDATOR = "AVRValidator"
LCP_CLIENT = "LCPClient"
IBC_MOCK_APP = "IBCMockApp"

# LCPClient constructor flag; overridable with the DEVELOPMENT_MODE constant
DEFAULT_DEVELOPMENT_MODE = True

#
# Protocol keys
#

PORT_MOCK = "mockapp"
LCP_CLIENT_TYPE = "lcp-client"

#
# Address ledger export keys
#

LEDGER_EXPORT_KEYS = {
    IBC_HANDLER: "IBC_HANDLER",
    LCP_PROTO_MARSHALER: "LCP_PROTO_MARSHALER",
    AVR_VALIDATOR: "AVR_VALIDATOR",
    LCP_CLIENT: "LCP_CLIENT",
    IBC_MOCK_APP: "IBC_MOCKAPP",
}
