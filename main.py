import json
import logging
import math
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, List, Literal, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth import create_access_token, decode_access_token, get_password_hash, verify_password
from config import APP_VERSION, FRONTEND_ORIGIN, LOG_LEVEL, PORT
from database import db, ensure_indexes, now_utc
from errors import EntryNotFound, MindPalError
from game_logic import get_coins_for_next_level
from journal import JournalService, day_key
from mood_analytics import analyze_moods
from relay import FORUM_ROOM, ForumRelay
from repositories import ForumRepository, JournalRepository, UserRepository, serialize
from schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    AuthResponse,
    Author,
    ForumReplyOut,
    ForumTopicOut,
    JournalEntryCreate,
    JournalEntryOut,
    JournalSubmitResponse,
    LeaderboardResponse,
    LeaderboardRow,
    LikeRequest,
    LoginRequest,
    MoodAnalyticsOut,
    MoodPointOut,
    PaginationOut,
    PetDataOut,
    PurchaseRequest,
    PurchaseResponse,
    RegisterRequest,
    ReplyCreate,
    ShopItem,
    TopicCreate,
    UserOut,
)
from sentiment import TextTooShort, analyze_text
from shop import CATALOGUE, purchase

logging.basicConfig(
    level=LOG_LEVEL,
    format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("mindpal")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.relay = ForumRelay()
    if db is not None:
        ensure_indexes(db)
    else:
        log.warning("DATABASE_URL / DATABASE_NAME not set, storage routes will answer 503")
    yield


app = FastAPI(title="MindPal API", version=APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_ORIGIN] if FRONTEND_ORIGIN else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------
# Error handling
# ----------------------
@app.exception_handler(MindPalError)
async def domain_error_handler(request: Request, exc: MindPalError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"errors": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


# ----------------------
# Dependencies
# ----------------------
def get_database() -> Database:
    if db is None:
        raise HTTPException(status_code=503, detail="Database not available")
    return db


def get_clock() -> Callable[[], datetime]:
    return now_utc


def get_users(database: Database = Depends(get_database)) -> UserRepository:
    return UserRepository(database)


def get_journals(database: Database = Depends(get_database)) -> JournalRepository:
    return JournalRepository(database)


def get_forum(database: Database = Depends(get_database)) -> ForumRepository:
    return ForumRepository(database)


def get_journal_service(
    users: UserRepository = Depends(get_users),
    journals: JournalRepository = Depends(get_journals),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> JournalService:
    return JournalService(users, journals, clock)


def get_relay(request: Request) -> ForumRelay:
    return request.app.state.relay


def get_current_user(
    authorization: Optional[str] = Header(None),
    users: UserRepository = Depends(get_users),
) -> dict:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    user_id = decode_access_token(authorization.split(" ", 1)[1])
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    user = users.get(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def user_out(user: dict) -> UserOut:
    pet = user.get("pet_data", {})
    return UserOut(
        id=str(user["_id"]),
        username=user["username"],
        email=user["email"],
        total_coins=user.get("total_coins", 0),
        current_streak=user.get("current_streak", 0),
        max_streak=user.get("max_streak", 0),
        level=user.get("level", 1),
        coins_for_next_level=get_coins_for_next_level(user.get("total_coins", 0)),
        last_journal_date=user.get("last_journal_date"),
        pet_data=PetDataOut(
            name=pet.get("name", "Buddy"),
            breed=pet.get("breed", "golden_retriever"),
            happiness=pet.get("happiness", 50),
            health=pet.get("health", 100),
            items=pet.get("items", []),
        ),
    )


def author_of(user: dict) -> Author:
    return Author(id=str(user["_id"]), name=user["username"])


def entry_out(doc: Optional[dict], model=JournalEntryOut) -> Optional[dict]:
    """Stored entry -> camelCase wire dict, leaving out fields the query projected away."""
    if doc is None:
        return None
    return model.model_validate(serialize(doc)).model_dump(by_alias=True, exclude_unset=True)


def topic_out(topic: dict) -> dict:
    return ForumTopicOut.model_validate(topic).model_dump(by_alias=True)


def reply_out(reply: dict) -> dict:
    return ForumReplyOut.model_validate(reply).model_dump(by_alias=True)


# ----------------------
# Health + Root
# ----------------------
@app.get("/")
def read_root():
    return {"app": "MindPal API", "status": "ok"}


@app.get("/api/health")
def health():
    response = {
        "status": "OK",
        "version": APP_VERSION,
        "database": "Not Available",
        "collections": [],
        "timestamp": now_utc().isoformat(),
    }
    if db is not None:
        try:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "Connected"
        except Exception as e:
            log.warning("Health check could not reach MongoDB: %s", e)
            response["database"] = f"Error: {str(e)[:50]}"
    return response


# ----------------------
# Auth
# ----------------------
@app.post("/api/auth/register", response_model=AuthResponse, status_code=201)
def register(
    body: RegisterRequest,
    users: UserRepository = Depends(get_users),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    user = users.create(
        username=body.username,
        email=body.email.lower(),
        password_hash=get_password_hash(body.password),
        pet_name=body.pet_name,
        now=clock(),
    )
    log.info("Registered user %s", user["username"])
    token = create_access_token({"sub": str(user["_id"]), "username": user["username"]})
    return AuthResponse(message="User registered successfully", token=token, user=user_out(user))


@app.post("/api/auth/login", response_model=AuthResponse)
def login(body: LoginRequest, users: UserRepository = Depends(get_users)):
    user = users.find_by_login(body.username)
    if not user or not verify_password(body.password, user.get("password_hash", "")):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token({"sub": str(user["_id"]), "username": user["username"]})
    return AuthResponse(message="Login successful", token=token, user=user_out(user))


# ----------------------
# Users
# ----------------------
@app.get("/api/users/profile", response_model=UserOut)
def profile(
    user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_users),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    return user_out(users.touch_activity(user, clock()))


@app.get("/api/users/leaderboard", response_model=LeaderboardResponse)
def leaderboard(
    type: Literal["coins", "streak"] = "coins",
    limit: int = Query(10, ge=1, le=100),
    users: UserRepository = Depends(get_users),
):
    sort_field = "total_coins" if type == "coins" else "current_streak"
    rows = [
        LeaderboardRow(
            rank=index + 1,
            username=u["username"],
            pet_name=u.get("pet_data", {}).get("name", "Buddy"),
            total_coins=u.get("total_coins", 0),
            current_streak=u.get("current_streak", 0),
            level=u.get("level", 1),
        )
        for index, u in enumerate(users.leaderboard(sort_field, limit))
    ]
    return LeaderboardResponse(type=type, leaderboard=rows)


# ----------------------
# Journal
# ----------------------
@app.post("/api/journal/entry", response_model=JournalSubmitResponse, status_code=201)
def create_entry(
    body: JournalEntryCreate,
    user: dict = Depends(get_current_user),
    service: JournalService = Depends(get_journal_service),
):
    return service.submit(str(user["_id"]), body)


@app.get("/api/journal/entries")
def list_entries(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: dict = Depends(get_current_user),
    journals: JournalRepository = Depends(get_journals),
):
    user_id = str(user["_id"])
    entries = [entry_out(e) for e in journals.page(user_id, page, limit)]
    total = journals.count(user_id)
    pagination = PaginationOut(
        current_page=page,
        total_pages=math.ceil(total / limit),
        total_entries=total,
        has_next=(page - 1) * limit + len(entries) < total,
        has_prev=page > 1,
    )
    return {"entries": entries, "pagination": pagination.model_dump(by_alias=True)}


@app.get("/api/journal/entry/{entry_id}")
def get_entry(
    entry_id: str,
    user: dict = Depends(get_current_user),
    journals: JournalRepository = Depends(get_journals),
):
    entry = journals.get(str(user["_id"]), entry_id)
    if entry is None:
        raise EntryNotFound()
    return {"entry": entry_out(entry)}


@app.get("/api/journal/today")
def today_entry(
    user: dict = Depends(get_current_user),
    journals: JournalRepository = Depends(get_journals),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    return {"entry": entry_out(journals.for_day(str(user["_id"]), day_key(clock())))}


@app.get("/api/journal/stats")
def journal_stats(
    user: dict = Depends(get_current_user),
    journals: JournalRepository = Depends(get_journals),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    user_id = str(user["_id"])
    month_start = clock().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    recent = [entry_out(e, MoodPointOut) for e in journals.recent(user_id, 7)]
    return {
        "totalEntries": journals.count(user_id),
        "entriesThisMonth": journals.count(user_id, since=month_start),
        "moodDistribution": journals.mood_distribution(user_id),
        "recentMoodTrend": list(reversed(recent)),
    }


@app.get("/api/journal/analytics", response_model=MoodAnalyticsOut)
def journal_analytics(
    user: dict = Depends(get_current_user),
    journals: JournalRepository = Depends(get_journals),
):
    return MoodAnalyticsOut.model_validate(analyze_moods(journals.all_for_user(str(user["_id"]))))


@app.post("/api/journal/analyze", response_model=AnalyzeResponse)
def analyze_entry(body: AnalyzeRequest):
    try:
        return AnalyzeResponse(**analyze_text(body.content))
    except TextTooShort as e:
        raise HTTPException(status_code=400, detail=str(e))


# ----------------------
# Shop
# ----------------------
@app.get("/api/shop/items", response_model=List[ShopItem])
def shop_items():
    return CATALOGUE


@app.post("/api/shop/purchase", response_model=PurchaseResponse)
def buy_item(
    body: PurchaseRequest,
    user: dict = Depends(get_current_user),
    users: UserRepository = Depends(get_users),
):
    return purchase(users, str(user["_id"]), body.item_id)


# ----------------------
# Forum
# ----------------------
@app.get("/api/forum")
def list_topics(
    user: dict = Depends(get_current_user),
    forum: ForumRepository = Depends(get_forum),
):
    return {"data": [topic_out(t) for t in forum.list_topics()]}


@app.post("/api/forum", status_code=201)
async def create_topic(
    body: TopicCreate,
    user: dict = Depends(get_current_user),
    forum: ForumRepository = Depends(get_forum),
    relay: ForumRelay = Depends(get_relay),
):
    topic = topic_out(forum.create_topic(author_of(user), body.title, body.content, body.category))
    await relay.broadcast("newPost", topic)
    return {"data": topic}


@app.get("/api/forum/{topic_id}")
def get_topic(
    topic_id: str,
    user: dict = Depends(get_current_user),
    forum: ForumRepository = Depends(get_forum),
):
    return {"data": topic_out(forum.get_topic(topic_id))}


@app.post("/api/forum/{topic_id}/replies", status_code=201)
async def add_reply(
    topic_id: str,
    body: ReplyCreate,
    user: dict = Depends(get_current_user),
    forum: ForumRepository = Depends(get_forum),
    relay: ForumRelay = Depends(get_relay),
):
    reply = reply_out(forum.add_reply(topic_id, author_of(user), body.content))
    await relay.broadcast("newReply", {"topicId": topic_id, "reply": reply})
    return {"data": reply}


@app.post("/api/forum/like")
async def like_post(
    body: LikeRequest,
    user: dict = Depends(get_current_user),
    forum: ForumRepository = Depends(get_forum),
    relay: ForumRelay = Depends(get_relay),
):
    if body.type == "topic":
        data = {"type": "topic", "id": body.id, "topicId": body.id, "likes": forum.like_topic(body.id)}
    else:
        liked = forum.like_reply(body.id, body.topic_id)
        data = {"type": "reply", "id": body.id, "topicId": liked["topic_id"], "likes": liked["likes"]}
    await relay.broadcast("updateLikes", data)
    return {"data": data}


# ----------------------
# Real-time relay
# ----------------------
async def handle_socket_message(relay: ForumRelay, websocket: WebSocket, forum: ForumRepository, message: dict):
    event = message.get("event")
    room = str(message.get("room") or FORUM_ROOM)

    if event == "getTopics":
        await relay.send(websocket, "forumTopics", [topic_out(t) for t in forum.list_topics()])
    elif event == "join":
        relay.join(websocket, room)
        await relay.send(websocket, "joined", {"room": room})
    elif event == "leave":
        relay.leave(websocket, room)
        await relay.send(websocket, "left", {"room": room})
    elif event == "chatMessage":
        await relay.broadcast(
            "chatMessage",
            {
                "room": room,
                "author": str(message.get("author") or "Anonymous"),
                "message": str(message.get("message") or ""),
                "sentAt": now_utc(),
            },
            room=room,
        )
    else:
        await relay.send(websocket, "error", {"message": f"Unknown event: {event}"})


@app.websocket("/ws/forum")
async def forum_socket(websocket: WebSocket, forum: ForumRepository = Depends(get_forum)):
    relay: ForumRelay = websocket.app.state.relay
    await relay.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                await relay.send(websocket, "error", {"message": "Messages must be JSON"})
                continue
            if not isinstance(message, dict):
                await relay.send(websocket, "error", {"message": "Messages must be JSON objects"})
                continue
            await handle_socket_message(relay, websocket, forum, message)
    except WebSocketDisconnect:
        log.debug("Forum socket closed by client")
    finally:
        relay.disconnect(websocket)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
