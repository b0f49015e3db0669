"""Configuration constants for task verification functionality."""

# Verdict
COMPLETION_THRESHOLD = 0.3  # confidence strictly above this marks a task completed

# Lexical Analysis
MIN_KEYWORD_LENGTH = 3  # tokens shorter than this are ignored
LEXICAL_CACHE_MAX_ENTRIES = 256  # distinct task contents kept in memory

STOP_WORDS = frozenset(
    [
        "the", "and", "a", "an", "in", "on", "at", "to", "for", "with", "by",
        "about", "like", "through", "over", "before", "between", "after",
        "from", "up", "down", "out", "off", "again", "further", "then", "once",
        "here", "there", "when", "where", "why", "how", "all", "any", "both",
        "each", "few", "more", "most", "other", "some", "such", "no", "nor",
        "not", "only", "own", "same", "so", "than", "too", "very", "can",
        "will", "just", "should", "now", "also", "get", "got", "make", "made",
        "put", "set", "this", "that", "these", "those", "was", "were", "has",
        "have", "had", "been", "being", "do", "does", "did", "done", "doing",
        "go", "goes", "going", "went", "gone",
    ]
)

# Difficulty Estimation
PRIORITY_DIFFICULTY_POINTS = {"low": 1, "medium": 2, "high": 3}
CATEGORY_DIFFICULTY_POINTS = {"work": 2, "study": 2, "exercise": 1, "health": 1}
LONG_TITLE_WORD_COUNT = 5  # titles with more words than this add a point
HARD_DIFFICULTY_SCORE = 6
MEDIUM_DIFFICULTY_SCORE = 3

# Task Context
REMOVAL_KEYWORDS = frozenset(
    ["remove", "clean", "clear", "empty", "declutter", "organize"]
)
EXERCISE_KEYWORDS = frozenset(
    ["exercise", "workout", "gym", "fitness", "train", "run", "lift", "cardio", "strength"]
)
REMOVAL_MARKER = "remove"
DEFAULT_ITEMS_TO_REMOVE = ("items", "clutter", "stuff", "objects", "things")
EXERCISE_TYPE_KEYWORDS = (
    "cardio", "strength", "weight", "run", "jog", "walk", "lift", "train",
    "yoga", "pilates", "stretch", "hiit", "circuit", "aerobic", "anaerobic",
)
EXERCISE_EQUIPMENT_KEYWORDS = (
    "treadmill", "bike", "machine", "weight", "dumbbell", "barbell", "bench",
    "rack", "mat", "ball", "band", "rope", "kettlebell", "elliptical", "rower",
)
DEFAULT_EXERCISE_TYPES = ("workout", "exercise", "fitness")

GYM_OBJECTS = (
    "exercise machine", "gym equipment", "weights", "fitness equipment",
    "workout machine", "bench", "treadmill", "exercise bike", "dumbbells",
    "weight rack", "fitness area", "training equipment",
)

# category -> (task type, expected objects, expected scenes)
CATEGORY_CONTEXT_TABLE = {
    "home": (
        "cleaning",
        ("clean", "tidy", "organized", "surface", "floor", "table", "desk",
         "vacuum", "mop", "broom", "cloth"),
        ("clean space", "organized room", "tidy environment", "home"),
    ),
    "exercise": (
        "exercise",
        GYM_OBJECTS + ("shoes", "gym", "fitness", "mat", "sports", "running", "workout"),
        ("gym", "fitness center", "workout area", "exercise room",
         "training facility", "outdoor space", "exercise area", "park"),
    ),
    "work": (
        "work",
        ("computer", "desk", "papers", "workspace", "office", "laptop",
         "monitor", "keyboard", "documents"),
        ("office", "workspace", "desk", "home office", "meeting room"),
    ),
    "study": (
        "study",
        ("books", "notes", "computer", "desk", "study materials", "textbook",
         "notebook", "pen", "highlighter"),
        ("study area", "desk", "library", "classroom", "quiet space"),
    ),
    "health": (
        "health",
        ("food", "kitchen", "cooking", "meal", "dish", "plate", "utensils",
         "ingredients", "pan", "pot", "medicine", "health items",
         "medical equipment", "pills", "vitamins", "medical supplies"),
        ("kitchen", "dining area", "cooking space", "countertop",
         "medical facility", "home", "pharmacy", "hospital", "clinic"),
    ),
    "shopping": (
        "shopping",
        ("products", "items", "groceries", "shopping bags", "cart", "store",
         "goods", "purchases"),
        ("store", "shopping area", "retail space", "market", "mall"),
    ),
    "travel": (
        "travel",
        ("luggage", "tickets", "passport", "travel items", "maps", "transportation"),
        ("airport", "station", "hotel", "outdoor", "travel destination"),
    ),
    "other": (
        "general",
        ("item", "object", "space", "area", "room"),
        ("indoor", "outdoor", "space", "area"),
    ),
}
DEFAULT_CATEGORY_CONTEXT = CATEGORY_CONTEXT_TABLE["other"]

# (trigger substrings, extra objects, extra scenes); every matching trigger fires
KEYWORD_TRIGGER_TABLE = (
    (
        ("desk", "table"),
        ("desk", "table", "chair", "surface", "workspace"),
        ("office", "workspace", "study area"),
    ),
    (
        ("clean", "tidy", "organize"),
        ("clean surface", "organized items", "tidy space"),
        ("clean room", "organized space", "tidy area"),
    ),
    (
        ("cook", "bake", "food"),
        ("food", "kitchen items", "cooking utensils", "ingredients", "meal"),
        ("kitchen", "dining area", "cooking space"),
    ),
    (
        ("exercise", "workout", "gym", "fitness", "train"),
        GYM_OBJECTS,
        ("gym", "fitness center", "workout area", "exercise room",
         "training facility", "outdoor space", "exercise area"),
    ),
    (
        ("run", "jog", "walk"),
        ("running shoes", "track", "treadmill", "path", "road"),
        ("outdoor", "park", "gym", "track", "road"),
    ),
    (
        ("weight", "lift", "strength"),
        ("weights", "dumbbells", "barbell", "weight machine", "bench", "rack"),
        ("gym", "weight room", "fitness center"),
    ),
)

# Evidence Matching
MAX_FUZZY_DISTANCE = 2
FUZZY_DISTANCE_LENGTH_DIVISOR = 3

CLEAN_SCENE_INDICATORS = ("clean", "empty", "tidy", "organized", "clear", "neat")
CLUTTER_INDICATORS = ("cluttered", "messy", "disorganized", "many items")
FEW_ITEMS_INDICATORS = ("few items", "no items", "empty", "clean space", "clean surface")
COMMON_DESK_ITEMS = (
    "paper", "book", "pen", "pencil", "notebook", "laptop", "computer",
    "mouse", "keyboard", "cup", "mug", "bottle", "phone", "document",
    "folder", "stapler", "tape", "scissors", "calculator", "charger",
)
SURFACE_INDICATORS = ("desk", "table", "surface", "countertop", "workspace")
GYM_SCENE_INDICATORS = ("gym", "fitness", "workout", "exercise", "training")
EQUIPMENT_INDICATORS = (
    "machine", "treadmill", "weight", "bench", "equipment", "bike", "dumbbell", "barbell",
)
PERSON_INDICATORS = ("person", "people", "man", "woman", "athlete", "trainer")
ITEM_SUMMARY_LIMIT = 3  # items listed in "items still present" style elements

CLEAN_SCENE_SCORE = 2.0
CLUTTER_PENALTY = 2.0
FEW_ITEMS_SCORE = 2.0
ITEM_REMOVED_SCORE = 0.5
MOST_ITEMS_REMOVED_SCORE = 1.0
SURFACE_VISIBLE_SCORE = 1.0
LOW_COMPLEXITY_THRESHOLD = 0.3
LOW_COMPLEXITY_SCORE = 1.5
HIGH_COMPLEXITY_THRESHOLD = 0.7
HIGH_COMPLEXITY_PENALTY = 1.0
GYM_SCENE_SCORE = 2.0
EQUIPMENT_INDICATOR_SCORE = 0.5
EXERCISE_TYPE_SCORE = 1.0
EXERCISE_EQUIPMENT_SCORE = 1.0
PERSON_SCORE = 1.0
KEYWORD_MATCH_SCORE = 1.0
EXPECTED_OBJECT_SCORE = 0.5
EXPECTED_SCENE_SCORE = 0.5

# Feedback confidence bands (lower bounds, exclusive)
EXCELLENT_CONFIDENCE = 0.8
HIGH_CONFIDENCE = 0.6
MODERATE_CONFIDENCE = 0.4
LOW_CONFIDENCE = 0.2

# Image Sampling
BRIGHTNESS_MAX_SAMPLES = 1000  # sampling stride = max(1, pixels // this)
GYM_COLOR_MAX_SAMPLES = 2000
ANALYSIS_SIZE = (100, 100)  # downscale for edges, palette and patterns
EQUIPMENT_ANALYSIS_SIZE = (224, 224)  # downscale for equipment line counts
IMAGE_CACHE_MAX_ENTRIES = 32

# Edges and Lines
EDGE_DELTA_THRESHOLD = 30  # summed RGB delta that counts as an edge
LINE_SIMILARITY_THRESHOLD = 20  # per-channel delta for "similar" neighbours
LINE_SCAN_STEP = 10
LINE_SCAN_MARGIN = 10
PATTERN_SCAN_STEP = 1
PATTERN_SCAN_MARGIN = 5
PATTERN_MIN_LINES = 3

# Complexity
COMPLEXITY_EDGE_WEIGHT = 0.7
COMPLEXITY_COLOR_WEIGHT = 0.3

# Gym Environment
GYM_COLOR_WEIGHT = 0.4
GYM_EDGE_WEIGHT = 0.3
GYM_PATTERN_WEIGHT = 0.3
GYM_EDGE_DENSITY_THRESHOLD = 0.4
GYM_LIKELIHOOD_THRESHOLD = 0.5

# Region Detection
RECTANGLE_MIN_ASPECT_RATIO = 0.2
RECTANGLE_MAX_ASPECT_RATIO = 5.0
RECTANGLE_MIN_SIZE = 0.05  # fraction of the shorter image side
RECTANGLE_MAX_OBSERVATIONS = 15
RECTANGLE_CANNY_LOW = 50
RECTANGLE_CANNY_HIGH = 150
RECTANGLE_APPROX_EPSILON = 0.02  # fraction of contour perimeter
FRAME_RECTANGLE_COUNT = 3  # raw quadrilaterals above this suggest a frame
COMPLEX_FRAME_RECTANGLE_COUNT = 6
MIN_DETECTED_LABELS = 3  # fewer labels triggers property-based labels

# Filler labels
REGION_FILLER_LABELS = ("desk", "table", "chair", "floor", "wall", "book", "computer", "phone", "paper")
REGION_FILLER_COUNT = 2
PROPERTY_FILLER_LABELS = ("desk", "table", "chair", "floor", "wall", "items", "objects", "furniture")
PROPERTY_FILLER_COUNT = 3
GYM_FILLER_COUNT = 4

# Text Recognition
TESSERACT_CONFIG = "--psm 6"

# Pose
ACTIVE_POSE_CONFIDENCE = 0.7
POSE_MIN_VISIBILITY = 0.5

# Gym Colors (channel values normalized to 0-1)
GYM_BLACK_MAX = 0.15
GYM_METAL_GRAY_RANGE = (0.4, 0.7)
GRAYSCALE_CHANNEL_TOLERANCE = 0.1
GYM_BRIGHT_MIN = 0.7
GYM_BRIGHT_OTHER_MAX = 0.3
GYM_BLUE_GREEN_MAX = 0.5
GYM_BLACK_PROPORTION = 0.15
GYM_GRAY_PROPORTION = 0.1
GYM_GRAY_ONLY_PROPORTION = 0.2
GYM_BRIGHT_PROPORTION = 0.05

# Dominant Colors
DOMINANT_COLOR_COUNT = 3

# Scene Classification
BRIGHT_SCENE_THRESHOLD = 0.7
DARK_SCENE_THRESHOLD = 0.3
MODERN_GYM_BRIGHTNESS = 0.6
COLORFUL_SCENE_THRESHOLD = 0.5
WIDE_ASPECT_RATIO = 1.5
TALL_ASPECT_RATIO = 0.7
CLUTTERED_COMPLEXITY = 0.7
MINIMALIST_COMPLEXITY = 0.3
OPEN_GYM_COMPLEXITY = 0.4

# Property Labels
BRIGHT_PROPERTY_THRESHOLD = 0.7
MOSTLY_CLEAN_BRIGHTNESS = 0.5
DARK_PROPERTY_THRESHOLD = 0.3
COLORFUL_PROPERTY_THRESHOLD = 0.6
MONOCHROME_PROPERTY_THRESHOLD = 0.2

# Pose Keypoint Geometry (normalized, y-up)
SQUAT_KNEE_ANKLE_DISTANCE = 0.1
LYING_ALIGNMENT_TOLERANCE = 0.1
LYING_SHOULDER_MAX_HEIGHT = 0.4
SEATED_KNEE_HIP_DISTANCE = 0.15

# Pose Model
POSE_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/"
    "pose_landmarker/pose_landmarker_lite/float16/latest/"
    "pose_landmarker_lite.task"
)
POSE_MODEL_FILENAME = "pose_landmarker_lite.task"
POSE_MAX_PEOPLE = 2
POSE_MIN_DETECTION_CONFIDENCE = 0.5

# Verification Progress
DECODED_PROGRESS = 0.1
SUB_ANALYSIS_PROGRESS_STEP = 0.15  # four concurrent sub-analyses
MATCHING_PROGRESS = 0.8
FEEDBACK_PROGRESS = 0.9
