import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from buildmart.core.dependencies import get_current_user, get_optional_user
from buildmart.core.errors import not_found, server_error, storage_unavailable, upload_error, validation_error
from buildmart.core.security import hash_password, verify_password
from buildmart.database import get_db
from buildmart.models.user import User
from buildmart.schemas.user import MeResponse, UserCreate, UserLogin, UserResponse, UserUpdate
from buildmart.services.storage_service import BlobStorage, get_storage

router = APIRouter(tags=["auth"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PROFILE_FOLDER = "uploads"


async def _upload_profile_picture(storage: Optional[BlobStorage], picture: Optional[UploadFile]) -> Optional[str]:
    if picture is None or not picture.filename:
        return None
    if storage is None:
        raise storage_unavailable()
    try:
        return await storage.upload_image(picture, PROFILE_FOLDER)
    except ValueError as ve:
        raise upload_error(ve, "profilePicture")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    fullName: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    company: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    profilePicture: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: Optional[BlobStorage] = Depends(get_storage),
):
    """Create an account; the password is stored as an argon2 hash"""
    try:
        try:
            data = UserCreate(
                username=username, password=password, full_name=fullName, email=email,
                phone=phone, company=company, bio=bio, location=location,
            )
        except ValidationError as e:
            raise validation_error(e)

        if db.query(User).filter(User.username == data.username).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Username already exists"},
            )

        data.profile_picture_url = await _upload_profile_picture(storage, profilePicture)

        fields = data.model_dump(exclude={"password"})
        user = User(**fields, hashed_password=hash_password(data.password))
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"User registered: {user.username} (ID: {user.id})")
        return {"id": user.id, "username": user.username}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error during registration: {str(e)}", exc_info=True)
        raise server_error(e, "registering the user")


@router.post("/login", response_model=UserResponse)
def login(credentials: UserLogin, request: Request, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == credentials.username).first()
    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Failed login attempt for username: {credentials.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid credentials"},
        )

    request.session["user_id"] = user.id
    logger.info(f"User logged in: {user.username}")
    return user


@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out"}


@router.get("/me", response_model=MeResponse)
def me(user: Optional[User] = Depends(get_optional_user)):
    if user is None:
        return MeResponse(authenticated=False, user=None)
    return MeResponse(authenticated=True, user=UserResponse.model_validate(user))


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    fullName: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    company: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    profilePicture: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Optional[BlobStorage] = Depends(get_storage),
):
    """Update the session user's own profile"""
    try:
        if user_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"message": "Forbidden: You can only edit your own profile"},
            )
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise not_found("User", user_id)

        submitted = {
            "full_name": fullName, "email": email, "phone": phone, "company": company,
            "bio": bio, "location": location, "password": password,
        }
        try:
            changes = UserUpdate(**{k: v for k, v in submitted.items() if v is not None})
        except ValidationError as e:
            raise validation_error(e)

        updates = changes.model_dump(exclude_unset=True)
        new_password = updates.pop("password", None)
        if new_password:
            user.hashed_password = hash_password(new_password)

        picture_url = await _upload_profile_picture(storage, profilePicture)
        if picture_url:
            updates["profile_picture_url"] = picture_url

        for field, value in updates.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)

        logger.info(f"User {user.username} updated their profile: {list(updates)}")
        return user

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error updating user {user_id}: {str(e)}", exc_info=True)
        raise server_error(e, "updating the profile")
