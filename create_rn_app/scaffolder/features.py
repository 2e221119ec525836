"""Feature modules: the optional integrations a project can be composed with.

Each module is a frozen descriptor listing the npm dependencies, the Expo
config plugins and the source files it contributes.  Modules know nothing
about each other; the composer applies them in a fixed order (backend first,
then paywall), and a later module's file wins if two modules write the same
path.

The "none"/"off" choices are real modules with empty contributions so the
composer never needs a special case for them.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Relative import path, from ``src/lib/``, of the base template's token
# storage (exports getToken / setToken / deleteToken).
TOKEN_STORAGE_IMPORT = "./storage"


class FeatureKind(str, Enum):
    BACKEND = "backend"
    PAYWALL = "paywall"


class Backend(str, Enum):
    """Backend/auth provider choice.  Exactly one is selected per project."""

    NONE = "none"
    FIREBASE = "firebase"
    SUPABASE = "supabase"


class GeneratedFile(BaseModel):
    """A source file a module writes, rendered from a bundled template."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Destination path relative to the project root")
    template: str = Field(..., description="Template path relative to the templates directory")


class FeatureModule(BaseModel):
    """Read-only description of one integration's contributions."""

    model_config = ConfigDict(frozen=True)

    kind: FeatureKind
    name: str
    label: str
    dependencies: Mapping[str, str] = Field(default_factory=dict, validate_default=True)
    plugins: tuple[str, ...] = ()
    files: tuple[GeneratedFile, ...] = ()

    @field_validator("dependencies")
    @classmethod
    def _read_only_dependencies(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @property
    def is_noop(self) -> bool:
        """True when the module contributes nothing at all."""
        return not (self.dependencies or self.plugins or self.files)


class FeatureSelection(BaseModel):
    """The user's answers: one backend, paywall on or off."""

    backend: Backend = Backend.NONE
    paywall: bool = False


# ---------------------------------------------------------------------------
# Module definitions
# ---------------------------------------------------------------------------

_FIREBASE_VERSION = "^21.6.1"

NO_BACKEND = FeatureModule(kind=FeatureKind.BACKEND, name="none", label="No backend")

FIREBASE = FeatureModule(
    kind=FeatureKind.BACKEND,
    name="firebase",
    label="Firebase (Auth, Firestore, Analytics)",
    dependencies={
        "@react-native-firebase/app": _FIREBASE_VERSION,
        "@react-native-firebase/auth": _FIREBASE_VERSION,
        "@react-native-firebase/firestore": _FIREBASE_VERSION,
        "@react-native-firebase/analytics": _FIREBASE_VERSION,
    },
    plugins=("@react-native-firebase/app", "@react-native-firebase/auth"),
    files=(
        GeneratedFile(path="src/lib/firebase.ts", template="firebase/lib/firebase.ts.j2"),
        GeneratedFile(path="src/hooks/useFirebaseAuth.ts", template="firebase/hooks/useFirebaseAuth.ts.j2"),
        GeneratedFile(path="src/hooks/useFirestore.ts", template="firebase/hooks/useFirestore.ts.j2"),
    ),
)

SUPABASE = FeatureModule(
    kind=FeatureKind.BACKEND,
    name="supabase",
    label="Supabase (Auth, Postgres)",
    dependencies={"@supabase/supabase-js": "^2.47.10"},
    files=(
        GeneratedFile(path="src/lib/supabase.ts", template="supabase/lib/supabase.ts.j2"),
        GeneratedFile(path="src/hooks/useSupabaseAuth.ts", template="supabase/hooks/useSupabaseAuth.ts.j2"),
        GeneratedFile(path="src/hooks/useSupabaseData.ts", template="supabase/hooks/useSupabaseData.ts.j2"),
    ),
)

NO_PAYWALL = FeatureModule(kind=FeatureKind.PAYWALL, name="no-paywall", label="No paywall")

SUPERWALL = FeatureModule(
    kind=FeatureKind.PAYWALL,
    name="superwall",
    label="Superwall (Paywalls + In-App Purchases)",
    dependencies={"@superwall/react-native-superwall": "^1.0.0"},
    plugins=("@superwall/react-native-superwall",),
    files=(
        GeneratedFile(path="src/lib/superwall.ts", template="superwall/lib/superwall.ts.j2"),
        GeneratedFile(path="src/hooks/useSuperwall.ts", template="superwall/hooks/useSuperwall.ts.j2"),
    ),
)

BACKEND_MODULES: dict[Backend, FeatureModule] = {
    Backend.NONE: NO_BACKEND,
    Backend.FIREBASE: FIREBASE,
    Backend.SUPABASE: SUPABASE,
}

PAYWALL_MODULES: dict[bool, FeatureModule] = {
    False: NO_PAYWALL,
    True: SUPERWALL,
}


def resolve_modules(selection: FeatureSelection) -> list[FeatureModule]:
    """Return the modules for *selection* in application order."""
    return [BACKEND_MODULES[selection.backend], PAYWALL_MODULES[selection.paywall]]
