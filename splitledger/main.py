# splitledger/main.py
# Главная точка входа FastAPI для SplitLedger:
# группы, участники, расходы с долями, платежи, балансы и settle-up.

from __future__ import annotations

import logging
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dotenv import load_dotenv
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from splitledger.db import engine  # noqa: E402  инициализация БД/пула соединений

from splitledger.routers.auth import router as auth_router  # noqa: E402
from splitledger.routers.users import router as users_router  # noqa: E402
from splitledger.routers.groups import router as groups_router  # noqa: E402
from splitledger.routers.group_members import router as group_members_router  # noqa: E402
from splitledger.routers.expenses import router as expenses_router  # noqa: E402
from splitledger.routers.payments import router as payments_router  # noqa: E402

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ORIGINS")
    if not raw:
        return DEFAULT_CORS_ORIGINS
    return [o.strip() for o in raw.split(",") if o.strip()]


app = FastAPI(
    title="SplitLedger Backend",
    description="Общие расходы в группах: доли, платежи, балансы и подсказки взаиморасчётов.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Подключение роутеров ---
app.include_router(auth_router,          prefix="/api/auth",          tags=["Авторизация"])
app.include_router(users_router,         prefix="/api/users",         tags=["Пользователи"])
app.include_router(groups_router,        prefix="/api/groups",        tags=["Группы"])
app.include_router(group_members_router, prefix="/api/group-members", tags=["Участники групп"])
app.include_router(expenses_router,      prefix="/api/expenses",      tags=["Расходы"])
app.include_router(payments_router,      prefix="/api/payments",      tags=["Платежи"])

@app.get("/")
def root():
    """Простой healthcheck."""
    return {"message": "SplitLedger backend работает!", "docs": "/docs"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("splitledger.main:app", host="0.0.0.0", port=8000, reload=False)
