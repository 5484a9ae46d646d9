"""On-chain layout constants for program accounts."""

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"

# Loader program ids.
BPF_LOADER_V2_ID = "BPFLoader2111111111111111111111111111111111"
BPF_LOADER_UPGRADEABLE_ID = "BPFLoaderUpgradeab1e11111111111111111111111"

# Upgradeable loader state (bincode, little endian). The enum tag is a u32.
UPGRADEABLE_TAG_SIZE = 4
UPGRADEABLE_TAG_PROGRAM = 2
UPGRADEABLE_TAG_PROGRAMDATA = 3
PUBKEY_SIZE = 32
# Program account: tag + programdata address.
PROGRAM_ACCOUNT_SIZE = UPGRADEABLE_TAG_SIZE + PUBKEY_SIZE
# ProgramData account: tag + slot (u64) + Option<Pubkey> authority, then the ELF.
PROGRAMDATA_SLOT_OFFSET = UPGRADEABLE_TAG_SIZE
PROGRAMDATA_METADATA_SIZE = UPGRADEABLE_TAG_SIZE + 8 + 1 + PUBKEY_SIZE

ELF_MAGIC = b"\x7fELF"
ELF64_HEADER_SIZE = 64

# getMultipleAccounts accepts at most this many keys per request.
MAX_MULTIPLE_ACCOUNTS = 100

FIXTURE_VERSION = 1
