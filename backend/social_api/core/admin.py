# social_api/core/admin.py
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine
from social_api.core.security import verify_password
from social_api.core.config import settings
from social_api.core.database import db_helper
from social_api.repositories.user_repository import UserRepository
from social_api.models.user import User, UserRole
from social_api.models.post import Post
from social_api.models.workout import Workout
from social_api.models.storage import StoredObject

# 1. Авторизация в админке: только пользователи с ролью admin
class AdminAuth(AuthenticationBackend):
    async def login(self, request: Request) -> bool:
        form = await request.form()
        email, password = form.get("username", ""), form.get("password", "")

        async with db_helper.session_factory() as session:
            user = await UserRepository(session).get_by_email(str(email))

        if user and user.role == UserRole.ADMIN.value and verify_password(str(password), user.password_hash):
            request.session.update({"admin_user_id": user.id})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        return request.session.get("admin_user_id") is not None

authentication_backend = AdminAuth(secret_key=settings.security.JWT_SECRET_KEY.get_secret_value())

# 2. Представления моделей (Views)

class UserAdmin(ModelView, model=User):
    column_list = [User.id, User.email, User.role, User.created_at]
    column_searchable_list = [User.email]
    column_sortable_list = [User.id, User.created_at]
    form_excluded_columns = [User.password_hash, User.posts, User.workouts]
    icon = "fa-solid fa-user"

class PostAdmin(ModelView, model=Post):
    column_list = [Post.id, Post.title, Post.user_id, Post.created_at]
    column_searchable_list = [Post.title]
    column_sortable_list = [Post.id, Post.created_at]
    # картинки удаляются только вместе с постом через API
    form_excluded_columns = [Post.images, Post.author]
    icon = "fa-solid fa-newspaper"

class WorkoutAdmin(ModelView, model=Workout):
    column_list = [Workout.id, Workout.title, Workout.reps, Workout.load, Workout.user_id]
    icon = "fa-solid fa-dumbbell"

class StoredObjectAdmin(ModelView, model=StoredObject):
    column_list = [StoredObject.id, StoredObject.filename, StoredObject.length, StoredObject.upload_date]
    column_searchable_list = [StoredObject.filename]
    can_create = False
    can_edit = False
    icon = "fa-solid fa-image"

# 3. Функция инициализации
def setup_admin(app, engine: AsyncEngine) -> Admin:
    admin = Admin(app, engine, authentication_backend=authentication_backend, title=f"{settings.app_name} Admin")

    admin.add_view(UserAdmin)
    admin.add_view(PostAdmin)
    admin.add_view(WorkoutAdmin)
    admin.add_view(StoredObjectAdmin)
    return admin
