"""Constants used throughout the RFXtrx project."""

# Serial line settings (8N1, no flow control)
RFXTRX_BAUDRATE = 38400

# Capacity of the interface-plane and sensor-plane queues
MESSAGE_QUEUE_LEN = 100

# The device needs at least RFXTRX_RESET_MIN_WAIT seconds of silence after a reset
RFXTRX_RESET_MIN_WAIT = 0.5
RFXTRX_RESET_WAIT = 1.0

# Frames carry a one byte length prefix
MAX_FRAME_SIZE = 256
HEADER_LEN = 3

# Length byte of every interface control frame
INTERFACE_COMMAND_LEN = 0x0D
