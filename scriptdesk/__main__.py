import uvicorn
from scriptdesk.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run("scriptdesk.main:app", host=settings.HOST, port=settings.PORT)
