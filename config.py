import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
STATIC_DIR = os.path.join(BASE_DIR, "static")
LOG_FILE = os.path.join(BASE_DIR, "launch.log")
CATALOG_PATH = os.getenv("CBT_CATALOG_PATH", "")   # 비어 있으면 내장 샘플 문제 사용

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
DEFAULT_TIMEOUT = 15.0
SESSION_TTL = int(os.getenv("CBT_SESSION_TTL", "3600"))   # 1시간
MAX_REPORTS = int(os.getenv("CBT_MAX_REPORTS", "500"))    # 보관할 오류 신고 수

# 출제 설정
DEFAULT_QUESTION_COUNT = 20
MAX_QUESTION_COUNT = 200
TICK_INTERVAL_SECONDS = float(os.getenv("CBT_TICK_INTERVAL", "1.0"))

# 채점 설정
PASS_SCORE = 60.0       # 합격 기준 (100점 만점)
EXAM_TOTAL_MARKS = 150  # 본시험 만점 (예상 점수 환산용)
