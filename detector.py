############################################
############ import statements #############
############################################
import cv2

import config

############################################
########### pre-built resources ############
############################################
kernel = cv2.getStructuringElement(cv2.MORPH_RECT, config.DILATE_KERNEL)


############################################
############# helper functions #############
############################################
# grey & blur - the representation kept between frames
def preprocess(frame):
    gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
    return cv2.GaussianBlur(gray, config.BLUR_KERNEL, 0)


# difference mask -> external contours
def find_motion_contours(previous, current):
    diff = cv2.absdiff(previous, current)
    mask = cv2.threshold(diff, config.DIFF_THRESHOLD, 255, cv2.THRESH_BINARY)[1]
    mask = cv2.dilate(mask, kernel)
    contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    return contours


def select_regions(contours, min_area=config.MIN_CONTOUR_AREA):
    """
    Bounding rects (x, y, w, h) of every contour with area >= min_area.

    All qualifying contours are kept, overlapping rects are not merged.
    """
    regions = []
    for cont in contours:
        if cv2.contourArea(cont) < min_area:
            continue
        regions.append(tuple(int(v) for v in cv2.boundingRect(cont)))
    return regions


def detect(frame, previous, min_area=config.MIN_CONTOUR_AREA):
    """
    Compare frame against the previous processed frame.

    Returns (motion_detected, regions, processed) where processed is the
    grey/blurred version of frame to pass as previous on the next call.
    Without a previous frame there is nothing to compare, so no motion.
    """
    processed = preprocess(frame)
    if previous is None:
        return False, [], processed

    # source changed resolution
    if previous.shape != processed.shape:
        previous = cv2.resize(previous, (processed.shape[1], processed.shape[0]))

    regions = select_regions(find_motion_contours(previous, processed), min_area)
    return bool(regions), regions, processed


class MotionDetector:
    """Keeps the previous processed frame between calls to detect()."""

    def __init__(self, min_area=config.MIN_CONTOUR_AREA):
        self.min_area = min_area
        self.previous = None

    def update(self, frame):
        # baseline only moves forward once detect() succeeded
        motion, regions, processed = detect(frame, self.previous, self.min_area)
        self.previous = processed
        return motion, regions

    def reset(self):
        self.previous = None
