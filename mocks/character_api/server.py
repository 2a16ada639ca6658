"""
Mock character API server for local development and tests.

Serves the two read paths the proxy uses, with the same response shapes
as the public API: a paged envelope for the collection and a bare object
for a single character.
"""

from typing import Dict, Any, List
from fastapi import FastAPI
from fastapi.responses import JSONResponse
import uvicorn

from shared.logging import get_logger


DEFAULT_CHARACTERS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "name": "Rick Sanchez",
        "status": "Alive",
        "species": "Human",
        "gender": "Male",
        "origin": {"name": "Earth (C-137)"},
        "location": {"name": "Citadel of Ricks"},
    },
    {
        "id": 2,
        "name": "Morty Smith",
        "status": "Alive",
        "species": "Human",
        "gender": "Male",
        "origin": {"name": "unknown"},
        "location": {"name": "Citadel of Ricks"},
    },
    {
        "id": 42,
        "name": "Big Head Morty",
        "status": "unknown",
        "species": "Human",
        "gender": "Male",
        "origin": {"name": "unknown"},
        "location": {"name": "Citadel of Ricks"},
    },
]


class MockCharacterApiServer:
    """Mock character API implementation."""

    def __init__(self, port: int = 8090, characters: List[Dict[str, Any]] = None):
        self.port = port
        self.logger = get_logger("mock.character_api")
        self.app = FastAPI(title="Mock Character API", version="1.0.0")

        self.characters: Dict[str, Dict[str, Any]] = {
            str(character["id"]): character
            for character in (characters if characters is not None else DEFAULT_CHARACTERS)
        }
        # Per-path request counts, for asserting on upstream traffic
        self.request_counts: Dict[str, int] = {}

        self._setup_routes()

    def _count(self, path: str) -> None:
        self.request_counts[path] = self.request_counts.get(path, 0) + 1

    def _setup_routes(self):
        """Set up API routes."""

        @self.app.get("/api/character")
        async def list_characters():
            self._count("/api/character")
            results = list(self.characters.values())
            return {
                "info": {"count": len(results), "pages": 1, "next": None, "prev": None},
                "results": results,
            }

        @self.app.get("/api/character/{character_id}")
        async def get_character(character_id: str):
            self._count(f"/api/character/{character_id}")
            character = self.characters.get(character_id)
            if character is None:
                self.logger.info("Character not found", character_id=character_id)
                return JSONResponse(status_code=404, content={"error": "Character not found"})
            return character

    def run(self):
        """Run the mock server."""
        self.logger.info("Starting mock character API", port=self.port)
        uvicorn.run(self.app, host="0.0.0.0", port=self.port)


if __name__ == "__main__":
    MockCharacterApiServer().run()
