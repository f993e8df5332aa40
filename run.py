import uvicorn
import sys
from pathlib import Path

# Add project root to Python path
project_root = str(Path(__file__).parent.absolute())
sys.path.insert(0, project_root)

from voice_interview.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()

    # Run the application
    uvicorn.run(
        "voice_interview.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
