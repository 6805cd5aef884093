import redis
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_redis

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db), client: redis.Redis = Depends(get_redis)):
    db.execute(text("SELECT 1"))
    client.ping()
    return {"status": "ok"}
