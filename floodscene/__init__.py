"""FloodScene: 3D flood-risk scene of a city district.

Import constants FIRST so logging and .env settings are in place before
any other module reads them.
"""

from floodscene import constants as _constants  # noqa: F401

from floodscene.controller import FloodSceneController, DataSources, SceneState
from floodscene.models import SceneConfig
from floodscene.projection import GeoProjection
