"""注册、登录与当前用户。"""

from fastapi import APIRouter

from academy.dependencies import CurrentClaims, ServicesDep
from academy.errors import NotFound, Unauthenticated
from academy.schemas.users import AuthResponse, LoginRequest, RegisterRequest, UserPublic

router = APIRouter()


@router.post("/register", response_model=AuthResponse)
def register(data: RegisterRequest, services: ServicesDep):
    """注册并直接返回 Token。"""
    user = services.identities.create(
        username=data.username,
        password=data.password,
        role=data.role,
        email=data.email,
        full_name=data.full_name,
    )
    token = services.tokens.issue(user.id, user.role, user.username)
    return AuthResponse(token=token, user=user)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, services: ServicesDep):
    """用户名或邮箱登录；失败时不透露用户是否存在。"""
    user = services.identities.authenticate(data.identifier, data.password)
    if user is None:
        raise Unauthenticated("Invalid credentials")
    token = services.tokens.issue(user.id, user.role, user.username)
    return AuthResponse(token=token, user=user)


@router.get("/me", response_model=UserPublic)
def me(claims: CurrentClaims, services: ServicesDep):
    user = services.identities.get(claims.subject_id)
    if user is None:
        raise NotFound("User not found")
    return user
