"""Application-wide constants.

This module centralizes all magic numbers, canned reply texts and demo
payload data to ensure a single source of truth and easier maintenance.

Constants are organized by category. Anything that operators may want to
change per deployment is mirrored as a field in src/config.py.
"""

# =============================================================================
# Facebook API
# =============================================================================

# Facebook Graph API version
FACEBOOK_GRAPH_API_VERSION = "v18.0"

# Graph API host for the Send API
FACEBOOK_GRAPH_API_HOST = "https://graph.facebook.com"

# Header carrying the HMAC-SHA1 payload signature
SIGNATURE_HEADER = "x-hub-signature"

# =============================================================================
# HTTP Timeout Configuration
# =============================================================================

# Timeout for Facebook Graph API calls (seconds)
FACEBOOK_API_TIMEOUT_SECONDS = 10.0

# Timeout for reply-service (Parse Server cloud code) calls (seconds)
REPLY_SERVICE_TIMEOUT_SECONDS = 10.0

# =============================================================================
# Retry Policy
# =============================================================================

# Extra attempts after the first one; 0 keeps the fire-once behavior
SEND_MAX_RETRIES = 0
REPLY_SERVICE_MAX_RETRIES = 0

# Base delay for exponential backoff between attempts (seconds)
RETRY_BACKOFF_SECONDS = 0.5

# =============================================================================
# Reply Service (Parse Server cloud functions)
# =============================================================================

REPLY_SERVICE_BASE_URL = "https://reply-msg-parse-server.herokuapp.com/parse/functions"

# Cloud function names
CLOUD_FUNCTION_TEST = "testMsg"
CLOUD_FUNCTION_GET_REPLY = "getReplyMsg"
CLOUD_FUNCTION_TRAINING = "botTraining"

# =============================================================================
# Canned Replies
# =============================================================================

DEFAULT_TEXT_METADATA = "DEVELOPER_DEFINED_METADATA"

AUTHENTICATION_SUCCESS_TEXT = "Authentication successful"
POSTBACK_CALLED_TEXT = "Postback called"
ATTACHMENT_RECEIVED_TEXT = "Message with attachment received"

QUICK_REPLY_ACK_PREFIX = "You choose answer : "
QUIZ_CORRECT_TEXT = "You choose correct answer"
QUIZ_WRONG_TEXT = "You choose wrong answer"

# Bot persona texts (Thai)
NOT_UNDERSTOOD_TEXT = "ข้าไม่เข้าใจที่เจ้าพูด"
TRAINING_SUCCESS_TEXT = "ข้าจำได้แล้ว ลองทักข้าใหม่ซิ อิอิ"
TRAINING_FAILED_TEXT = "ข้าว่ามีบางอย่างผิดพลาด ลองใหม่ซิ"
HELP_PROMPT_TEXT = "อยากรู้วิธีสั่งข้ารึ จะให้ข้าทำอะไร?"
HELP_TEACH_TITLE = "สอนข้า"
HELP_SEND_TITLE = "ส่งข้อความ"
BOT_COMMAND_TEXT = "bot command"

# Payload sent with the "test" keyword to the testMsg cloud function
TEST_CLOUD_FUNCTION_MSG = "test"

# =============================================================================
# Commands
# =============================================================================

TRAINING_COMMAND_PREFIX = "#ask"
TRAINING_ANSWER_SENTINEL = " #ans "
BOT_COMMAND_PREFIX = "#bot"

# Commands shorter than this are never parsed as commands
MIN_COMMAND_LENGTH = 7

# =============================================================================
# Quiz
# =============================================================================

QUIZ_PAYLOAD_PREFIX = "QUIZ"
DEFAULT_QUIZ_ID = "demo"
DEFAULT_QUIZ_TEXT = "test quiz message"
DEFAULT_QUIZ_OPTION_COUNT = 4

# Quiz id -> correct option
QUIZ_CATALOGUE: dict[str, str] = {
    DEFAULT_QUIZ_ID: "2",
}

# =============================================================================
# Demo Assets
# =============================================================================

DEMO_ASSET_BASE_URL = "http://messengerdemo.parseapp.com"

DEMO_IMAGE_PATH = "/img/rift.png"
DEMO_GIF_PATH = "/img/instagram_logo.gif"
DEMO_AUDIO_PATH = "/audio/sample.mp3"
DEMO_VIDEO_PATH = "/video/allofus480.mov"
DEMO_FILE_PATH = "/files/test.txt"
