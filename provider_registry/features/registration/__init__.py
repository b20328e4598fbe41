"""Registration feature module for Provider Registry.

This module mints a provider entry through the namespace minter and writes
the provider's notes onto the newly created token-bound account.
"""

from provider_registry.features.registration.machine import (
    RegistrationPhase,
    RegistrationState,
    ResumeRegistration,
    StartRegistration,
    notes_payload,
    reduce_registration,
    registration_step_text,
)
from provider_registry.features.registration.service import RegistrationOrchestrator
from provider_registry.features.registration.validators import ProviderValidator

__all__ = [
    "ProviderValidator",
    "RegistrationOrchestrator",
    "RegistrationPhase",
    "RegistrationState",
    "ResumeRegistration",
    "StartRegistration",
    "notes_payload",
    "reduce_registration",
    "registration_step_text",
]
