# app/domain/frame_service.py
import logging
import secrets
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config.settings import settings
from app.delivery.schemas.body import FramesView, extract_frame_data
from app.infrastructure.database.models import Collection, Frame, User

INTENT_CREATE_COLLECTION = "create-collection"
INTENT_DELETE = "delete"
INTENT_UPDATE = "update"

# "first collection" is the lowest position; time and id only break races
COLLECTION_ORDER = (Collection.position, Collection.create_time, Collection.id)

# --- LOGGER ---
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


class FrameServiceError(Exception):
    status_code = 500


class NotFoundError(FrameServiceError):
    status_code = 404


class ForbiddenError(FrameServiceError):
    status_code = 403


def secret_matches(user: User, secret: Optional[str]) -> bool:
    if not secret:
        return False
    return secrets.compare_digest(str(secret).encode(), str(user.id).encode())


class FrameService:
    """Reads and writes one user's collections and frames.

    Every public method issues its queries on the session it was built with and
    commits after a single write; nothing spans more than one statement.
    """

    def __init__(self, session: AsyncSession, enforce_ownership: Optional[bool] = None):
        self.session = session
        if enforce_ownership is None:
            enforce_ownership = settings.ENFORCE_FRAME_OWNERSHIP
        self.enforce_ownership = enforce_ownership

    async def get_user(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username.lower())
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def _load(self, username: str, collection_id: Optional[str]) -> Tuple[User, Collection, List[Collection]]:
        user = await self.get_user(username)
        if user is None:
            raise NotFoundError("User not found")

        stmt = select(Collection).options(selectinload(Collection.frames))
        if collection_id:
            stmt = stmt.where(Collection.id == collection_id)
        else:
            stmt = stmt.where(Collection.user_id == user.id).order_by(*COLLECTION_ORDER).limit(1)
        collection = (await self.session.execute(stmt)).scalars().first()
        if collection is None:
            raise NotFoundError("Collection not found")

        stmt = select(Collection).where(Collection.user_id == user.id).order_by(*COLLECTION_ORDER)
        collections = list((await self.session.execute(stmt)).scalars().all())
        return user, collection, collections

    @staticmethod
    def _to_view(user: User, collection: Collection, collections: List[Collection]) -> FramesView:
        # schemas carry no owner ids, so dumping the view never leaks them
        return FramesView.model_validate(
            {"user": user, "collection": collection, "collections": collections},
            from_attributes=True,
        )

    async def load_view(self, username: str, collection_id: Optional[str] = None) -> FramesView:
        return self._to_view(*await self._load(username, collection_id))

    async def load_page(self, username: str, collection_id: Optional[str], secret: Optional[str]) -> Tuple[FramesView, bool]:
        """Loader data plus whether ``secret`` grants edit controls."""
        user, collection, collections = await self._load(username, collection_id)
        return self._to_view(user, collection, collections), secret_matches(user, secret)

    async def authenticate(self, username: str, secret: Optional[str]) -> User:
        user = await self.get_user(username)
        if user is None:
            raise NotFoundError("User not found")
        if not secret_matches(user, secret):
            logger.warning(f"Rejected mutation for '{user.username}': secret mismatch")
            raise ForbiddenError("User does not match")
        return user

    async def create_collection(self, user: User, name: str) -> Collection:
        stmt = select(func.coalesce(func.max(Collection.position), 0)).where(Collection.user_id == user.id)
        position = (await self.session.execute(stmt)).scalar_one() + 1
        collection = Collection(name=name, user_id=user.id, position=position)
        self.session.add(collection)
        await self.session.commit()
        logger.info(f"Collection {collection.id} created for '{user.username}'")
        return collection

    async def _owned_frame(self, user: User, frame_id: str) -> Frame:
        stmt = (
            select(Frame, Collection.user_id)
            .outerjoin(Collection, Frame.collection_id == Collection.id)
            .where(Frame.id == frame_id)
        )
        row = (await self.session.execute(stmt)).first()
        if row is None:
            raise NotFoundError("Frame not found")
        frame, owner_id = row
        self._check_owner(user, owner_id, f"frame {frame_id}")
        return frame

    def _check_owner(self, user: User, owner_id: Optional[str], target: str) -> None:
        if owner_id == user.id:
            return
        if self.enforce_ownership:
            logger.warning(f"Rejected '{user.username}' acting on {target} owned by someone else")
            raise ForbiddenError("User does not match")
        logger.warning(f"'{user.username}' is acting on {target} owned by someone else")

    async def delete_frame(self, user: User, frame_id: str) -> None:
        frame = await self._owned_frame(user, frame_id)
        await self.session.delete(frame)
        await self.session.commit()
        logger.info(f"Frame {frame_id} deleted by '{user.username}'")

    async def update_frame(self, user: User, frame_id: str, data: Dict[str, Any]) -> Frame:
        frame = await self._owned_frame(user, frame_id)
        for key, value in data.items():
            setattr(frame, key, value)
        await self.session.commit()
        logger.info(f"Frame {frame_id} updated by '{user.username}' ({', '.join(sorted(data)) or 'no fields'})")
        return frame

    async def create_frame(self, user: User, collection_id: Optional[str], data: Dict[str, Any]) -> Frame:
        collection = await self.session.get(Collection, collection_id) if collection_id else None
        if collection is None:
            raise NotFoundError("Collection not found")
        self._check_owner(user, collection.user_id, f"collection {collection_id}")

        frame = Frame(collection_id=collection.id, **data)
        self.session.add(frame)
        await self.session.commit()
        logger.info(f"Frame {frame.id} created in collection {collection.id} by '{user.username}'")
        return frame

    async def apply(self, user: User, form: Mapping[str, Any]) -> Optional[Collection]:
        """Dispatch a form submission by its ``intent``.

        Returns the new collection for ``create-collection``, otherwise ``None``.
        """
        intent = form.get("intent")
        if intent == INTENT_CREATE_COLLECTION:
            return await self.create_collection(user, str(form.get("name") or "").strip())
        if intent == INTENT_DELETE:
            await self.delete_frame(user, str(form.get("id") or ""))
        elif intent == INTENT_UPDATE:
            await self.update_frame(user, str(form.get("id") or ""), extract_frame_data(form))
        else:
            await self.create_frame(user, form.get("collectionId"), extract_frame_data(form))
        return None
