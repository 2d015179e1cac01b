"""FastAPI main application for the Landlord game backend"""

import logging
from fastapi import FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from .serialization import get_public_room_info
from .websocket_server import game_manager

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Landlord Card Game API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {"message": "Dou Dizhu (Landlord) game server is running. Connect via the client application."}

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "rooms": len(game_manager.engine.rooms),
        "connections": len(game_manager.connection_manager.active_connections),
    }

@app.get("/rooms/{room_id}")
async def room_info(room_id: str):
    room = game_manager.engine.get_room(room_id)
    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return get_public_room_info(room.state, room.rules)

@app.websocket("/ws/{room_id}")
async def websocket_endpoint(websocket: WebSocket, room_id: str):
    await game_manager.handle_websocket(websocket, room_id)

@app.websocket("/ws")
async def websocket_endpoint_default_room(websocket: WebSocket):
    await game_manager.handle_websocket(websocket)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3001)
