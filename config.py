import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv()

APP_URL = os.getenv('APP_URL', 'http://localhost:3000')
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
SEED_DEMO_DATA = os.getenv('SEED_DEMO_DATA', 'true').lower() in ('1', 'true', 'yes')

BREVO_KEY = os.getenv('BREVO_KEY')
MAIL_SENDER = os.getenv('MAIL_SENDER', 'no-reply@example.com')

BLOB_API_URL = os.getenv('BLOB_API_URL', 'https://blob.vercel-storage.com')
BLOB_READ_WRITE_TOKEN = os.getenv('BLOB_READ_WRITE_TOKEN')


@dataclass(frozen=True)
class SeedConfig:
    """Fixed identifiers for the demo organization, admin and interview.

    Built once at startup and stored in ``app.config['SEED']`` so handlers
    never carry their own copies of these ids.
    """
    organization_id: str = '550e8400-e29b-41d4-a716-446655440000'
    admin_user_id: str = '550e8400-e29b-41d4-a716-446655440001'
    demo_interview_id: str = '550e8400-e29b-41d4-a716-446655440002'
    demo_tokens: tuple = ('DEMO123', 'TEST456')
    demo_candidate_email: str = 'demo@example.com'
    demo_candidate_name: str = 'Demo User'
    admin_email: str = 'admin@example.com'
    admin_password: str = field(default='admin123', repr=False)


def load_seed_config() -> SeedConfig:
    defaults = SeedConfig()
    tokens = os.getenv('DEMO_TOKENS')
    return SeedConfig(
        organization_id=os.getenv('DEMO_ORGANIZATION_ID', defaults.organization_id),
        admin_user_id=os.getenv('DEMO_ADMIN_USER_ID', defaults.admin_user_id),
        demo_interview_id=os.getenv('DEMO_INTERVIEW_ID', defaults.demo_interview_id),
        demo_tokens=tuple(t.strip() for t in tokens.split(',') if t.strip()) if tokens else defaults.demo_tokens,
        demo_candidate_email=os.getenv('DEMO_CANDIDATE_EMAIL', defaults.demo_candidate_email),
        demo_candidate_name=os.getenv('DEMO_CANDIDATE_NAME', defaults.demo_candidate_name),
        admin_email=os.getenv('DEMO_ADMIN_EMAIL', defaults.admin_email),
        admin_password=os.getenv('DEMO_ADMIN_PASSWORD', defaults.admin_password),
    )
