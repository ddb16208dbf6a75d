from contextlib import asynccontextmanager
from fastapi import FastAPI, Body, Depends, HTTPException, Request, status
from fastapi.responses import Response
from typing import Any, Optional
import asyncio
import json
import logging
import re

from api.config import settings
from api.registry import ToolRegistry, build_registry
from olx.config import get_domain_summary
from olx.crawlers.browser import BrowserSession
from olx.errors import ErrorCode, ToolNotFoundError, is_user_error
from olx.factory import ScraperFactory


# Custom formatter to strip ANSI color codes from file logs
class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

    def format(self, record):
        message = super().format(record)
        return self.ansi_escape.sub('', message)


def setup_logging():
    """
    Console logging with colors, plus an optional color-stripped log file.

    Scraper loggers ('scraper.<domain>') get their own handlers and do not
    propagate, so each message appears once.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handlers = []
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(settings.log_format))
    handlers.append(console_handler)

    if settings.log_to_file:
        settings.log_dir.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
        file_handler.setFormatter(ColorStripFormatter(settings.log_format))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    scraper_logger = logging.getLogger('scraper')
    scraper_logger.propagate = False
    # Only add handlers if not already present (prevents duplicates on module reload)
    if not scraper_logger.handlers:
        for handler in handlers:
            scraper_logger.addHandler(handler)
    scraper_logger.setLevel(level)


setup_logging()
logger = logging.getLogger(__name__)


# HTTP status for each failure kind; anything unlisted is a 500
STATUS_BY_ERROR_CODE = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.UNSUPPORTED_DOMAIN: status.HTTP_400_BAD_REQUEST,
    ErrorCode.LISTING_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TOOL_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ABORT_ERROR: 499,  # Client closed request
    ErrorCode.PAGE_NAVIGATION_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.NETWORK_ERROR: status.HTTP_502_BAD_GATEWAY,
}

SHUTDOWN_TIMEOUT = 5.0  # seconds


def status_for_error(error: Exception) -> int:
    code = getattr(error, 'code', None)
    return STATUS_BY_ERROR_CODE.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def create_app(session: Optional[BrowserSession] = None) -> FastAPI:
    """
    Build the application.

    Args:
        session: Browser session to use; a headless Chromium session
            configured from settings is created when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.
        Starts the browser on startup and releases it on shutdown.
        """
        # Startup
        logger.info("=" * 60)
        logger.info(f"{settings.app_name} Starting Up")
        logger.info("=" * 60)

        browser = session or BrowserSession(headless=settings.headless)
        await browser.start()
        factory = ScraperFactory(browser, **settings.scraper_options())
        registry = build_registry(factory)

        app.state.session = browser
        app.state.factory = factory
        app.state.registry = registry
        if registry.has_tools():
            logger.info(f"Tools available: {', '.join(registry.get_tool_names())}")
        else:
            logger.warning("No tools registered")
        logger.info("Server ready to accept requests")

        yield  # Application runs here

        # Shutdown
        logger.info("=" * 60)
        logger.info(f"{settings.app_name} Shutting Down")
        logger.info("=" * 60)

        factory.clear_cache()
        registry.clear()
        try:
            await asyncio.wait_for(browser.close(), timeout=SHUTDOWN_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning("Browser shutdown timed out, forcing exit")

        logger.info("Shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan
    )
    _add_routes(app)
    return app


def get_registry(request: Request) -> ToolRegistry:
    return request.app.state.registry


def _add_routes(app: FastAPI):

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        """Return empty response for favicon requests"""
        return Response(status_code=204)

    @app.get("/")
    async def root():
        return {"message": settings.app_name, "version": settings.app_version}

    @app.get("/tools")
    async def list_tools(registry: ToolRegistry = Depends(get_registry)):
        """List every tool with its input schema"""
        return [tool.to_definition() for tool in registry.get_all_tools()]

    @app.get("/domains")
    async def list_domains():
        """List the supported OLX marketplaces"""
        return get_domain_summary()

    @app.post("/tools/{tool_name}")
    async def call_tool(
        tool_name: str,
        arguments: Any = Body(None),
        registry: ToolRegistry = Depends(get_registry),
    ):
        """
        Run a tool with the request body as its arguments.

        Success returns the tool output as a JSON text block; failure
        returns the error message verbatim as the detail.
        """
        tool = registry.get(tool_name)
        if tool is None:
            error = ToolNotFoundError(tool_name)
            raise HTTPException(status_code=status_for_error(error), detail=str(error))

        result = await tool.execute(arguments if arguments is not None else {})

        if not result.success:
            if is_user_error(result.error):
                logger.info(f"Tool {tool_name} rejected arguments: {result.error}")
            else:
                logger.warning(f"Tool {tool_name} failed: {result.error}")
            raise HTTPException(status_code=status_for_error(result.error), detail=str(result.error))

        data = result.data.to_dict() if hasattr(result.data, 'to_dict') else result.data
        return {
            "content": [
                {
                    "type": "text",
                    "text": json.dumps(data, indent=2, ensure_ascii=False),
                }
            ]
        }


app = create_app()


def run():
    """Start the server with the configured host and port."""
    import uvicorn

    # Configure uvicorn for faster shutdown
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        access_log=True,
        log_config=None,  # Keep the logging configured above
        timeout_keep_alive=5,
        timeout_graceful_shutdown=5.0,
    )


if __name__ == "__main__":
    run()
