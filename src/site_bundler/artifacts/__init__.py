from .models import NAMING, Artifact, ArtifactKind, ArtifactNaming
from .writer import ArtifactWriter

__all__ = ["Artifact", "ArtifactKind", "ArtifactNaming", "ArtifactWriter", "NAMING"]
