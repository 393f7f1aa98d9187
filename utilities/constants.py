BREVO_SEND_URL = 'https://api.brevo.com/v3/smtp/email'

QUESTION_TYPES = ('multiple_choice', 'text', 'coding', 'video', 'file_upload')
FILE_QUESTION_TYPES = ('video', 'file_upload')
# Hyphenated spellings are still sent by older clients
QUESTION_TYPE_ALIASES = {
    'multiple-choice': 'multiple_choice',
    'file-upload': 'file_upload',
}

INTERVIEW_STATUSES = ('draft', 'active', 'paused', 'completed')

ADMIN_ROLES = ('admin', 'editor', 'owner')

INTERVIEW_LINK_PLACEHOLDER = '[INTERVIEW_LINK]'
ACCESS_TOKEN_LENGTH = 16

# Word-count buckets for text answers: (label, upper bound inclusive)
TEXT_LENGTH_BUCKETS = (
    ('short', 50),
    ('medium', 150),
)

# Divisor for the rough words-per-minute estimate (chars per word)
CHARS_PER_WORD = 5
ERASE_KEYS = ('Backspace', 'Delete')

CSV_HEADERS = (
    'Session ID',
    'Candidate Email',
    'Candidate Name',
    'Status',
    'Started At',
    'Completed At',
    'Duration (seconds)',
    'Total Responses',
    'Completion Rate (%)',
)


def normalize_question_type(question_type):
    if not question_type:
        return question_type
    return QUESTION_TYPE_ALIASES.get(question_type, question_type)
