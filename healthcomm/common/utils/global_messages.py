class GlobalMessages:
    # Auth Messages
    NOT_AUTHENTICATED = "User must be authenticated."
    INVALID_CREDENTIALS = "Could not validate credentials. Please log in again."

    # User Messages
    USER_NOT_FOUND = "User not found."
    SENDER_NOT_FOUND = "Sender user not found."
    PATIENT_NOT_FOUND = "Patient not found."
    PROVIDER_PROFILE_NOT_FOUND = "Care provider profile not found."

    # Permission Messages
    ASSIGN_PERMISSION_DENIED = "You do not have permission to assign a care team member for this patient."
    ESCALATE_PERMISSION_DENIED = "You do not have permission to escalate this patient."
    PATIENT_ACCESS_DENIED = "You do not have access to this patient's data."
    AVAILABILITY_PERMISSION_DENIED = "Only medical professionals and caretakers can update availability."
    CREDENTIALS_PERMISSION_DENIED = "Only medical professionals can submit credentials for verification."
    PROFILE_FIELDS_NOT_APPLICABLE = "These fields do not apply to a {role} profile: {fields}."
    NOT_INVITATION_RECIPIENT = "You are not the recipient of this invitation."
    INVITATION_ROLE_MISMATCH = "Your account role does not match the invitation type."

    # Invitation Messages
    INVITATION_NOT_FOUND = "Invitation not found."
    NOTIFICATION_NOT_FOUND = "Notification not found."
    INVITATION_ALREADY_RESPONDED = "Invitation has already been responded to."
    INVITATION_EXPIRED = "Invitation has expired."

    # Care Team Messages
    NO_DOCTOR_FOR_ESCALATION = "No available doctors for escalation."
    ALREADY_HAS_DOCTOR = "Patient already has an assigned doctor."
    CREDENTIALS_SUBMITTED = "Verification request submitted. You will be notified once verified."

    # Profile Messages
    PROFILE_FIELD_REQUIRED = "{field} cannot be null."
    PROFILE_CREATED = "Profile created."
    PROFILE_UPDATED = "Profile updated."

    # Failure Messages
    SEND_INVITATION_FAILED = "Failed to send invitation."
    RESPOND_INVITATION_FAILED = "Failed to respond to invitation."
    ESCALATION_FAILED = "Failed to escalate to doctor."
    AVAILABILITY_FAILED = "Failed to update availability."
    EXPORT_FAILED = "Failed to export vitals data."
    VITALS_FAILED = "Failed to record vitals reading."
    ALERT_FAILED = "Failed to record alert."
    CREDENTIALS_FAILED = "Failed to submit verification request."
    PROFILE_FAILED = "Failed to update profile."
