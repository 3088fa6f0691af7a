"""
SQLAlchemy models
"""
from visionsprint.core.database import Base  # noqa: F401
# Import all models here so Alembic can detect them
from visionsprint.models.project import (PROJECT_TYPE_LABELS,  # noqa: F401
                                         Project, ProjectJoin, ProjectType,
                                         Vote)
from visionsprint.models.showcase import (REACTION_EMOJIS,  # noqa: F401
                                          Reaction, ReactionType,
                                          WatchedVideo)
from visionsprint.models.sprint import (APP_STATE_ID, AppStage,  # noqa: F401
                                        AppState, Sprint)
from visionsprint.models.team import Submission, Team, TeamMember  # noqa: F401
from visionsprint.models.user import (DISCIPLINE_LABELS,  # noqa: F401
                                      Account, Discipline, Session, User)
from visionsprint.models.vision import (VISION_AREAS, Vision,  # noqa: F401
                                        VisionLike)
