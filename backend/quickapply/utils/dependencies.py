from ..config import UPLOAD_DIR
from ..services.artifact_store import ArtifactStore


def get_artifact_store() -> ArtifactStore:
    # Tests override this dependency to point at an isolated directory.
    return ArtifactStore(UPLOAD_DIR)
