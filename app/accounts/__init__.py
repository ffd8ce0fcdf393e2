"""
Accounts app: users and business profiles.

This app handles:
- The email-identified User model used for authentication
- The business Profile shown next to every thread and message
- ProfileDirectory, the read-only identity resolver used by the inbox

Related apps:
    - messaging: participants are Users, enquiry anchors are Profiles

Usage:
    from accounts.services import ProfileDirectory

    identity = ProfileDirectory.resolve(profile_id)
    if identity is not None:
        print(identity.display_name, identity.avatar_url)
"""
