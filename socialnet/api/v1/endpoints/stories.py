"""Story endpoints."""

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from socialnet.api.deps import get_current_active_user, get_db
from socialnet.models.user import User
from socialnet.schemas.story import (
    ExpiredStoriesResponse,
    StoryCreate,
    StoryListResponse,
    StoryResponse,
    StoryViewResponse,
)
from socialnet.services.story_service import story_service
from socialnet.utils.file_handler import read_upload_file

router = APIRouter(
    prefix="/stories",
    tags=["Stories"],
)


@router.post(
    "",
    response_model=StoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create story from a hosted URL",
)
def create_story(
    story_in: StoryCreate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> StoryResponse:
    story = story_service.create_story(
        db, user_id=current_user.id, content_type=story_in.content_type, media_url=story_in.media_url
    )
    return StoryResponse.model_validate(story)


@router.post(
    "/upload",
    response_model=StoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a story image or video",
)
def upload_story(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> StoryResponse:
    content, _ = read_upload_file(file)
    story = story_service.create_story_from_upload(db, user_id=current_user.id, data=content)
    return StoryResponse.model_validate(story)


@router.get(
    "/following",
    response_model=StoryListResponse,
    summary="Active stories of followed users",
)
def get_following_stories(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> StoryListResponse:
    stories = story_service.get_following_stories(db, user_id=current_user.id)
    return StoryListResponse(stories=[StoryResponse.model_validate(s) for s in stories])


@router.get(
    "/user/{user_id}",
    response_model=StoryListResponse,
    summary="Active stories of a user",
)
def get_user_stories(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> StoryListResponse:
    stories = story_service.get_user_stories(db, user_id=user_id)
    return StoryListResponse(stories=[StoryResponse.model_validate(s) for s in stories])


@router.post(
    "/{story_id}/view",
    response_model=StoryViewResponse,
    summary="Mark a story as viewed",
)
def view_story(
    story_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> StoryViewResponse:
    count = story_service.view_story(db, story_id=story_id, viewer_id=current_user.id)
    return StoryViewResponse(story_id=story_id, view_count=count)


@router.delete(
    "/{story_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete own story",
)
def delete_story(
    story_id: int,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> None:
    story_service.delete_story(db, story_id=story_id, user_id=current_user.id)
