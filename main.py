import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, Header, Query
from fastapi.middleware.cors import CORSMiddleware
from jose import jwt, JWTError
from pymongo import DESCENDING
from pymongo.database import Database

import database
from database import REPORTS, LEADERBOARDS, create_document
from schemas import Report as ReportSchema, ReportCreate, ReportStatus, LeaderboardEntry

APP_NAME = "Mangrove Watch API"
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change")
JWT_ALG = os.getenv("JWT_ALG", "HS256")

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title=APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Dependencies ----------

def get_db() -> Database:
    if database.db is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return database.db


def verify_token(authorization: Optional[str] = Header(None)):
    """Tokens come from the external auth provider; ``sub`` is the user id."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    try:
        scheme, token = authorization.split(" ", 1)
        if scheme.lower() != "bearer":
            raise ValueError("Invalid auth scheme")
        data = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
    except (ValueError, JWTError):
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user_id = data.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token has no subject")
    return {"userId": user_id}


# ---------- Basic routes ----------
@app.get("/")
def root():
    return {"message": f"{APP_NAME} running"}


@app.get("/test")
def test_database():
    info = {
        "backend": "running",
        "database": "disconnected",
        "collections": [],
    }
    try:
        if database.db is not None:
            info["database"] = "connected"
            info["collections"] = database.db.list_collection_names()[:10]
    except Exception as e:
        info["database"] = f"error: {str(e)[:80]}"
    return info


# ---------- Report endpoints ----------

def heat_intensity(severity: Optional[int]) -> float:
    return max(0.2, (severity or 3) / 5)


@app.post("/reports")
def create_report(report: ReportCreate, user=Depends(verify_token), db: Database = Depends(get_db)):
    stored = ReportSchema(
        **report.model_dump(),
        userId=user["userId"],
        status="pending",
        createdAt=datetime.now(timezone.utc),
    )
    data = stored.model_dump(exclude={"id"})
    _id = create_document(REPORTS, data, database=db)
    logger.info("Report %s submitted by %s", _id, user["userId"])
    return {"id": _id, **data}


@app.get("/reports")
def list_reports(status: Optional[ReportStatus] = None, limit: Optional[int] = Query(None, ge=1),
                 db: Database = Depends(get_db)):
    query = {"status": status} if status else {}
    cursor = db[REPORTS].find(query).sort("createdAt", DESCENDING)
    if limit:
        cursor = cursor.limit(limit)
    out = []
    for d in cursor:
        d["id"] = str(d.get("_id"))
        d.pop("_id", None)
        out.append(d)
    return out


@app.get("/reports/heatmap")
def report_heatmap(db: Database = Depends(get_db)):
    points = []
    for d in db[REPORTS].find({}, {"lat": 1, "lng": 1, "severity": 1}):
        # 0,0 marks a report submitted without a location
        if not d.get("lat") or not d.get("lng"):
            continue
        points.append([d["lat"], d["lng"], heat_intensity(d.get("severity"))])
    return points


# ---------- Leaderboard ----------

@app.get("/leaderboard")
def get_leaderboard(limit: int = Query(10, ge=1, le=100), db: Database = Depends(get_db)):
    cursor = db[LEADERBOARDS].find({}).sort("points", DESCENDING).limit(limit)
    return [LeaderboardEntry.from_document(d).model_dump() for d in cursor]
