############################################
################ Parameters ################
############################################
# frame source
SOURCE = 0                  # device index or path to a video file
FALLBACK_FPS = 20.0         # used when the source reports fps <= 0

# motion
BLUR_KERNEL = (21, 21)
DIFF_THRESHOLD = 25         # intensity cutoff for the binary mask
DILATE_KERNEL = (3, 3)
MIN_CONTOUR_AREA = 1500     # smaller contours are noise

# recording
OUTPUT_DIR = "tmp"          # must already exist
CODEC = "MJPG"
FILE_EXT = ".avi"
RECORD_SECONDS = 5          # fixed clip length, no extension on motion
COOLDOWN = 10               # seconds after a clip closes before a new one

# ui
WINDOW_NAME = "Motion Detection"
EXIT_KEY = 27               # ESC
LABEL = "Motion Detected"
LABEL_POS = (10, 20)
BOX_COLOR = (0, 255, 0)     # BGR
LABEL_COLOR = (0, 0, 255)

# logging
LOG_DIR = "logs"
