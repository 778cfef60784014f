from unifeast.application.profile.commands.ensure_profile import EnsureProfileCommand
from unifeast.application.profile.commands.update_profile import UpdateProfileCommand

__all__ = ["EnsureProfileCommand", "UpdateProfileCommand"]
