from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stackmentor.core.config import settings
from stackmentor.core.database import Base, engine
from stackmentor.core.errors import register_error_handlers
from stackmentor.core.logging import get_module_logger
from stackmentor.models.user import User  # noqa: F401
from stackmentor.models.group import Group  # noqa: F401
from stackmentor.models.membership import GroupMember  # noqa: F401
from stackmentor.models.verification_token import VerificationToken  # noqa: F401
from stackmentor.models.conversation import Conversation, DirectConversationParticipant  # noqa: F401
from stackmentor.models.message import Message, MessageReadStatus  # noqa: F401

from stackmentor.api.routes.auth import router as auth_router
from stackmentor.api.routes.users import router as users_router
from stackmentor.api.routes.groups import router as groups_router
from stackmentor.api.routes.conversations import router as conversations_router

# ✅ SSE
from stackmentor.realtime.sse import router as sse_router

logger = get_module_logger()

Base.metadata.create_all(bind=engine)

app = FastAPI(title="StackMentor API", version="0.1.0")

# ✅ CORS primero
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    allow_credentials=False,
)

# NotFound/Conflict/InvalidArgument -> 404/409/400
register_error_handlers(app)

# ✅ Routers después
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(groups_router)
app.include_router(conversations_router)

# ✅ SSE
app.include_router(sse_router)

logger.info("app_started", environment=settings.ENVIRONMENT)


@app.get("/")
def root():
    return {"status": "ok", "message": "StackMentor API running"}


@app.get("/health")
def health():
    return {"ok": True}
