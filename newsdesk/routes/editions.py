from newsdesk.routes.content import build_content_router
from newsdesk.schemas.content import EditionCreate, EditionResponse, EditionUpdate
from newsdesk.services.content_kinds import EDITION

router = build_content_router(EDITION, EditionCreate, EditionUpdate, EditionResponse)
