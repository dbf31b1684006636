import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildmart.core.dependencies import ensure_owner_or_admin, get_current_user
from buildmart.core.errors import not_found, server_error
from buildmart.database import get_db
from buildmart.models.company import Company
from buildmart.models.jobs import Job
from buildmart.models.user import User
from buildmart.schemas.jobs import JobCreate, JobResponse, JobUpdate
from buildmart.services.records import load_jobs

router = APIRouter(tags=["jobs"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _check_company(db: Session, company_id: Optional[str]):
    if company_id and not db.query(Company).filter(Company.id == company_id).first():
        raise not_found("Company", company_id)


@router.get("", response_model=List[JobResponse])
def list_jobs(userId: Optional[str] = Query(None), db: Session = Depends(get_db)):
    try:
        return load_jobs(db, user_id=userId)
    except Exception as e:
        logger.error(f"Error fetching jobs: {str(e)}", exc_info=True)
        raise server_error(e, "fetching jobs")


@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: str, db: Session = Depends(get_db)):
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise not_found("Job", job_id)
    return job


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    job_data: JobCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        _check_company(db, job_data.company_id)
        logger.info(f"User {current_user.username} is posting job '{job_data.title}'")

        job = Job(**job_data.model_dump(), user_id=current_user.id)
        db.add(job)
        db.commit()
        db.refresh(job)

        logger.info(f"Job created successfully: {job.title} (ID: {job.id})")
        return job

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating job: {str(e)}", exc_info=True)
        raise server_error(e, "creating the job")


@router.put("/{job_id}", response_model=JobResponse)
def update_job(
    job_id: str,
    job_update: JobUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        job = db.query(Job).filter(Job.id == job_id).first()
        if not job:
            raise not_found("Job", job_id)
        ensure_owner_or_admin(job.user_id, current_user, "jobs", "edit")

        updates = job_update.model_dump(exclude_unset=True)
        _check_company(db, updates.get("company_id"))
        if "required_skills" in updates and updates["required_skills"] is None:
            updates["required_skills"] = []

        logger.info(f"User {current_user.username} is updating job {job_id}: {list(updates)}")
        for field, value in updates.items():
            setattr(job, field, value)
        db.commit()
        db.refresh(job)
        return job

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error updating job {job_id}: {str(e)}", exc_info=True)
        raise server_error(e, "updating the job")


@router.delete("/{job_id}")
def delete_job(
    job_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        job = db.query(Job).filter(Job.id == job_id).first()
        if not job:
            raise not_found("Job", job_id)
        ensure_owner_or_admin(job.user_id, current_user, "jobs", "delete")

        logger.info(f"User {current_user.username} is deleting job {job_id}")
        db.delete(job)
        db.commit()
        return {"message": "Job deleted successfully", "id": job_id}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error deleting job {job_id}: {str(e)}", exc_info=True)
        raise server_error(e, "deleting the job")
