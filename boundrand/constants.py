# Word drawn per rejection-sampling attempt
DRAW_SIZE = 4                # bytes
DRAW_BYTE_ORDER = "little"   # fixed decode order for every draw

UINT32_MAX = 0xFFFFFFFF
INT32_MAX = 0x7FFFFFFF

# Consecutive rejections in one call before a warning is logged.
# Telemetry only; sampling never stops. Reaching it by chance has
# probability below 2**-64.
REJECTION_WARN_THRESHOLD = 64

# Seeded streams
BLAKE2B_BLOCK_SIZE = 32
CHACHA_KEY_SIZE = 32
CHACHA_NONCE_SIZE = 12
CHACHA_DEFAULT_NONCE = b"\x00" * CHACHA_NONCE_SIZE

# Argon2id parameters for ChaCha20Source.from_passphrase
ARGON_TIME_COST = 3
ARGON_MEMORY_COST_KIB = 64 * 1024  # 64 MiB
ARGON_PARALLELISM = 4
ARGON_MIN_SALT_SIZE = 8

# Uniformity checks
DEFAULT_ALPHA = 0.01
DEFAULT_CHECK_TRIALS = 100_000
MAX_CHECK_BINS = 1 << 16
MIN_EXPECTED_PER_BIN = 5
