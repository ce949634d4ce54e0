"""Process-wide verbosity and TensorFlow device handling."""

import warnings

warnings.filterwarnings(
    "ignore",
    message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
    category=UserWarning,
    module="google.protobuf",
)

VERBOSE = False


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf

tf.get_logger().setLevel("ERROR")


def set_verbose(enabled):
    """Turn engine logging and TensorFlow's Python logging on or off."""

    global VERBOSE
    VERBOSE = bool(enabled)
    tf.get_logger().setLevel("INFO" if VERBOSE else "ERROR")


CPU_DEVICE = "/CPU:0"


def select_device():
    """Return the first GPU when TensorFlow can see one, the CPU otherwise.

    Memory growth is enabled on every visible GPU so that several engines can
    share the card.
    """

    log("TensorFlow version: %s" % tf.__version__)
    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        log("No GPU found, using CPU")
        return CPU_DEVICE
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as e:
        # memory growth must be set before the GPUs are initialized
        log(e)
        return CPU_DEVICE
    log("GPU found, using %s" % gpus[0].name)
    return '/GPU:0'
