import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

class Settings:
    # Application Settings
    APP_NAME = os.getenv("APP_NAME", "HRVisualQA")
    DEBUG = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Browser Configuration
    TEST_TIMEOUT = int(os.getenv("TEST_TIMEOUT", "30000"))
    HEADLESS_MODE = os.getenv("HEADLESS_MODE", "True").lower() == "true"
    BROWSER_TYPE = os.getenv("BROWSER_TYPE", "chromium")
    VIEWPORT_WIDTH = int(os.getenv("VIEWPORT_WIDTH", "1280"))
    VIEWPORT_HEIGHT = int(os.getenv("VIEWPORT_HEIGHT", "720"))

    # Target Application
    BASE_URL = os.getenv("BASE_URL", "https://opensource-demo.orangehrmlive.com/web/index.php/auth/login")

    # Visual Testing
    VISUAL_DIFF_THRESHOLD = float(os.getenv("VISUAL_DIFF_THRESHOLD", "0.05"))
    VISUAL_AI_API_KEY = os.getenv("VISUAL_AI_API_KEY", "")

    # Base Directories
    PROJECT_ROOT = Path(__file__).parent.parent.resolve()
    REPORTS_DIR = Path(os.getenv("REPORTS_DIR", str(PROJECT_ROOT / "reports")))

    # Visual Regression Directories
    VISUAL_DIR = REPORTS_DIR / "visual"
    BASELINE_DIR = VISUAL_DIR / "baseline"
    ACTUAL_DIR = VISUAL_DIR / "actual"
    DIFF_DIR = VISUAL_DIR / "diff"
    SUMMARIES_DIR = VISUAL_DIR / "summaries"

    # Generated Artifacts
    ML_MODELS_DIR = REPORTS_DIR / "ml" / "models"
    GENERATED_TESTS_DIR = REPORTS_DIR / "generated_tests"

    @classmethod
    def ensure_directories(cls):
        """Create all necessary directories if they don't exist"""
        base_directories = [
            cls.REPORTS_DIR,
            cls.VISUAL_DIR,
            cls.BASELINE_DIR,
            cls.ACTUAL_DIR,
            cls.DIFF_DIR,
            cls.SUMMARIES_DIR,
            cls.ML_MODELS_DIR,
            cls.GENERATED_TESTS_DIR
        ]

        for directory in base_directories:
            directory.mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_visual_dirs(cls, root: Path = None) -> dict:
        """Get baseline/actual/diff/summary directories, optionally under a custom root"""
        if root is None:
            cls.ensure_directories()
            return {
                'baseline': cls.BASELINE_DIR,
                'actual': cls.ACTUAL_DIR,
                'diff': cls.DIFF_DIR,
                'summaries': cls.SUMMARIES_DIR
            }

        root = Path(root)
        dirs = {
            'baseline': root / "baseline",
            'actual': root / "actual",
            'diff': root / "diff",
            'summaries': root / "summaries"
        }
        for directory in dirs.values():
            directory.mkdir(parents=True, exist_ok=True)
        return dirs

    @classmethod
    def get_generated_tests_dir(cls, page_name: str = None) -> Path:
        """Get the generated tests directory, organized by page name"""
        cls.ensure_directories()

        if page_name:
            page_dir = cls.GENERATED_TESTS_DIR / page_name.lower()
            page_dir.mkdir(parents=True, exist_ok=True)
            return page_dir

        return cls.GENERATED_TESTS_DIR

    @classmethod
    def get_browser_config(cls) -> dict:
        """Get browser launch configuration"""
        return {
            'browser_type': cls.BROWSER_TYPE,
            'headless': cls.HEADLESS_MODE,
            'timeout': cls.TEST_TIMEOUT,
            'viewport': {'width': cls.VIEWPORT_WIDTH, 'height': cls.VIEWPORT_HEIGHT}
        }

settings = Settings()
