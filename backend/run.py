"""
Entry point for the formulation modeling backend.

卷烟辅材设计建模软件 - 后端启动入口
"""
import uvicorn
from formulation.config import get_settings


def main():
    """Run the FastAPI application."""
    settings = get_settings()
    uvicorn.run(
        "formulation.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info"
    )


if __name__ == "__main__":
    main()
