import motor.motor_asyncio
from pymongo import ASCENDING

from app.utils.utils import MONGO_DETAILS, DB_NAME
from app.utils.logging_config import get_logger

logger = get_logger(__name__)

logger.info(f"Initializing MongoDB connection to database: {DB_NAME}")

try:
    client = motor.motor_asyncio.AsyncIOMotorClient(MONGO_DETAILS)
    db = client[DB_NAME]
    logger.info("MongoDB client initialized successfully")
except Exception as e:
    logger.error(f"Failed to initialize MongoDB client: {e}")
    raise

# Collections
job_postings_coll = db["job_postings"]
skills_coll = db["skills"]
projects_coll = db["projects"]
experience_coll = db["work_experience"]
job_matches_coll = db["job_matches"]
profiles_coll = db["profiles"]


async def _ensure_index(coll, keys, label: str, **kwargs):
    try:
        await coll.create_index(keys, **kwargs)
        logger.debug(f"Created index on {label}")
    except Exception as e:
        if "already exists" in str(e).lower():
            logger.debug(f"Index on {label} already exists")
        else:
            logger.warning(f"Could not create index on {label}: {e}")


async def init_indexes():
    """Index initialization for collections."""
    logger.info("Starting database index initialization")

    await _ensure_index(job_postings_coll, [("job_id", ASCENDING)], "job_postings.job_id", unique=True)
    await _ensure_index(job_postings_coll, [("user_id", ASCENDING), ("status", ASCENDING)], "job_postings.(user_id, status)")

    await _ensure_index(profiles_coll, [("user_id", ASCENDING)], "profiles.user_id", unique=True)
    await _ensure_index(skills_coll, [("user_id", ASCENDING), ("name", ASCENDING)], "skills.(user_id, name)", unique=True)
    await _ensure_index(projects_coll, [("user_id", ASCENDING), ("stars", ASCENDING)], "projects.(user_id, stars)")
    await _ensure_index(experience_coll, [("user_id", ASCENDING), ("start_date", ASCENDING)], "work_experience.(user_id, start_date)")

    # At most one stored analysis per (user, job); the service upserts on this key
    await _ensure_index(job_matches_coll, [("user_id", ASCENDING), ("job_id", ASCENDING)], "job_matches.(user_id, job_id)", unique=True)

    logger.info("Database index initialization completed")
