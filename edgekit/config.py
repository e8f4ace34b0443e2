"""Defaults for the filter recipes and the command line."""

# Canny (also the operation run when no flag is given)
CANNY_SIGMA = 1.0
CANNY_T1 = 50       # strong threshold
CANNY_T2 = 20       # weak threshold
CANNY_GAUSS_SIZE = 5

# Laplacian of Gaussian
LOG_SIGMA = 1.0
LOG_GAUSS_SIZE = 5

# Gaussian blur
BLUR_SIZE = 7
BLUR_WEIGHT = 1.0
BLUR_WEIGHT_MIN = 0.0
BLUR_WEIGHT_MAX = 100.0

# 8-bit range for thresholds
BYTE_MIN = 0
BYTE_MAX = 255
