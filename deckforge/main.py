from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from deckforge.api import cards_router, decks_router, health_router
from deckforge.config import settings
from deckforge.models.failure import DeckForgeError

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    version=pkg_version("deckforge"),
)

app.include_router(cards_router)
app.include_router(decks_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DeckForgeError)
async def deckforge_error_handler(_request: Request, exc: DeckForgeError) -> JSONResponse:
    """Return known failures as a classified JSON envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"failure": exc.to_detail().model_dump(mode="json")},
    )
