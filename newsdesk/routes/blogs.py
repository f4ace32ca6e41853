from newsdesk.routes.content import build_content_router
from newsdesk.schemas.content import BlogCreate, BlogResponse, BlogUpdate
from newsdesk.services.content_kinds import BLOG

router = build_content_router(BLOG, BlogCreate, BlogUpdate, BlogResponse)
