# Admin actions operate on the users, listings and audit_log tables
# (see modules/users/models.py, modules/listings/models.py, modules/audit/models.py)

"""
Role state machine per target user:

    user <-> pending_volunteer -> verified_volunteer <-> admin

| action            | from                          | to                 |
|-------------------|-------------------------------|--------------------|
| approve_volunteer | pending_volunteer             | verified_volunteer |
| reject_volunteer  | pending_volunteer             | user               |
| promote_admin     | any role except admin         | admin              |
| demote_admin      | admin (not self, not "admin") | verified_volunteer |
| delete_user       | any (not self, not "admin")   | (row removed)      |

Every transition is written as a conditional update on the role observed
when the target was loaded, and writes one audit_log entry.
"""

APPROVE_VOLUNTEER = "approve_volunteer"
REJECT_VOLUNTEER = "reject_volunteer"
PROMOTE_ADMIN = "promote_admin"
DEMOTE_ADMIN = "demote_admin"
DELETE_USER = "delete_user"
