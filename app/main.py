from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
import logging
from pydantic import BaseModel, ConfigDict, Field

from agent.agent import get_conversation_manager
from agent.core.memory import DEFAULT_SESSION_ID, ConversationManager
from app import mock_data
from config.settings import get_settings


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("sample_shop")


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Start the default conversation with the process, not on the first request.
    if get_settings().google_api_key:
        get_conversation_manager()
    else:
        logger.warning("GOOGLE_API_KEY not set; chat endpoints will answer 500")
    yield


app = FastAPI(title="Sample Shop Assistant", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

PAGES = {
    "/": "index.html",
    "/login": "login.html",
    "/forgot": "forgot.html",
    "/FAQ": "Faq.html",
    "/myOrders": "myOrders.html",
    "/logout": "logout.html",
}


class ChatRequest(BaseModel):
    message: Any = Field("", description="User's latest message, forwarded as-is")
    client_id: Optional[str] = Field(
        None, description="Conversation key; omitted means the shared conversation"
    )


class ResetRequest(BaseModel):
    client_id: Optional[str] = None


class CartAddRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")


def _as_text(value: Any) -> str:
    # null becomes an empty turn; numbers and other JSON values go through as text.
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def conversation_manager() -> ConversationManager:
    if not get_settings().google_api_key:
        raise HTTPException(
            status_code=500,
            detail="Missing GOOGLE_API_KEY in environment or .env",
        )
    return get_conversation_manager()


@app.post("/api/chat")
def chat(
    req: ChatRequest,
    manager: ConversationManager = Depends(conversation_manager),
) -> Any:
    client_id = req.client_id or DEFAULT_SESSION_ID
    text = _as_text(req.message)
    logger.info("Incoming chat: client_id=%s query_len=%s", client_id, len(text))
    reply = manager.send_message(text, session_id=client_id)
    if not reply.ok:
        return JSONResponse(status_code=500, content={"response": reply.text})
    return {"response": reply.text}


@app.post("/api/chat/reset")
def reset_chat(
    req: Optional[ResetRequest] = None,
    manager: ConversationManager = Depends(conversation_manager),
) -> Dict[str, str]:
    client_id = (req.client_id if req else None) or DEFAULT_SESSION_ID
    logger.info("Chat reset requested: client_id=%s", client_id)
    return {"message": manager.reset_session(client_id)}


@app.get("/api/products")
def products() -> List[mock_data.Product]:
    return mock_data.list_products()


@app.get("/api/products/{product_id}")
def product(product_id: str) -> mock_data.Product:
    found = mock_data.get_product(product_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return found


@app.get("/api/cart")
def cart() -> List[mock_data.Product]:
    return mock_data.list_cart()


@app.post("/api/cart")
def add_to_cart(req: CartAddRequest) -> Dict[str, Any]:
    added = mock_data.add_to_cart(req.product_id)
    if added is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": f"{added.name} added to cart", "cart": mock_data.list_cart()}


@app.delete("/api/cart/{product_id}")
def remove_from_cart(product_id: str) -> Dict[str, Any]:
    if not mock_data.remove_from_cart(product_id):
        raise HTTPException(status_code=404, detail="Product not in cart")
    return {"message": "Item removed from cart", "cart": mock_data.list_cart()}


@app.delete("/api/cart")
def clear_cart() -> Dict[str, Any]:
    mock_data.clear_cart()
    return {"message": "Cart cleared", "cart": []}


@app.get("/api/orders")
def orders() -> List[mock_data.Order]:
    return mock_data.list_orders()


@app.get("/api/orders/{order_id}")
def order(order_id: str) -> mock_data.Order:
    found = mock_data.get_order(order_id)
    if found is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return found


def _page_handler(filename: str):
    def serve_page() -> FileResponse:
        path = Path(get_settings().static_dir) / filename
        if not path.is_file():
            raise HTTPException(status_code=404, detail=f"{filename} not found")
        return FileResponse(path)

    serve_page.__name__ = f"page_{Path(filename).stem.lower()}"
    return serve_page


for route, page in PAGES.items():
    app.get(route, include_in_schema=False)(_page_handler(page))


@app.get("/health")
def health():
    return {"status": "ok"}


# Mounted last so the API and page routes above take precedence.
if Path(settings.static_dir).is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir), name="static")


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
