from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from relaybot.api.save import router as save_router
from relaybot.config import Settings, get_settings
from relaybot.logging_config import bot_logger as logger, set_log_level
from relaybot.telegram_bot.bot import RelayBot

VERSION = "0.1.0"


def create_app(settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Settings are loaded once here and handed to every component.
    """
    settings = settings or get_settings()
    set_log_level(settings.log_level)

    bot = RelayBot.from_settings(settings, http_client=http_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Register webhook on startup, close outbound connections on shutdown."""
        logger.info("Registering Telegram webhook...")
        await bot.initialize()
        yield
        logger.info("Shutting down Telegram bot...")
        await bot.shutdown()

    app = FastAPI(
        title="Relay Bot",
        description="Telegram to Perplexity relay",
        version=VERSION,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.bot = bot

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "environment": settings.environment,
            "version": VERSION
        }

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": "Relay Bot",
            "status": "Telegram + Perplexity bot is running"
        }

    async def process_webhook(request: Request, secret_token: Optional[str]):
        # Verify secret token if configured
        if settings.telegram_webhook_secret:
            if secret_token != settings.telegram_webhook_secret:
                raise HTTPException(status_code=403, detail="Invalid secret token")

        try:
            update_data = await request.json()
        except ValueError:
            # Not JSON: nothing to answer, but don't make Telegram redeliver
            logger.warning("Webhook body is not JSON")
            return {"ok": True}

        # Handle inline: the reply is sent before Telegram gets its 200
        try:
            await app.state.bot.handle_update(update_data)
        except Exception as e:
            logger.error(f"Error in webhook handler: {e}", exc_info=True)
            return JSONResponse(status_code=500, content={"ok": False})

        return {"ok": True}

    # Telegram webhook endpoints
    @app.post("/webhook/{token}")
    async def telegram_webhook(
        token: str,
        request: Request,
        x_telegram_bot_api_secret_token: str = Header(None)
    ):
        """
        Webhook endpoint for Telegram updates.

        The bot token in the path doubles as a shared secret.
        """
        if token != settings.telegram_bot_token:
            raise HTTPException(status_code=403, detail="Invalid webhook token")
        return await process_webhook(request, x_telegram_bot_api_secret_token)

    @app.post("/webhook")
    async def telegram_webhook_plain(
        request: Request,
        x_telegram_bot_api_secret_token: str = Header(None)
    ):
        """Webhook endpoint without the token in the path."""
        return await process_webhook(request, x_telegram_bot_api_secret_token)

    # Include routers
    app.include_router(save_router)

    return app


def run() -> None:
    """Console entry point: load config, start uvicorn."""
    import uvicorn

    settings = get_settings()
    app = create_app(settings)
    logger.info(f"Server running on port {settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
