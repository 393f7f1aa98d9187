import sys
import os

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from app import create_app
from analytics import compute_interview_analytics, upload_volume
from models import Interview
from utilities.formatting import format_duration, format_file_size, format_number


def query_database():
    """Initializes the app and prints an analytics summary for every interview."""
    app = create_app({'SEED_DEMO_DATA': False})
    with app.app_context():
        print("--- Querying Database ---")

        interviews = Interview.query.order_by(Interview.created_at).all()

        if not interviews:
            print("No interviews found in the database.")
            return

        print(f"Found {len(interviews)} interview(s).\n")
        for interview in interviews:
            report = compute_interview_analytics(interview.id)
            summary = report['interview']
            print(f"Interview ID: {interview.id}")
            print(f"  Title: {interview.title} [{interview.status}]")
            print(f"  Sessions: {summary['total_sessions']} ({summary['completed_sessions']} completed)")
            print(f"  Average Completion Time: {format_duration(summary['average_completion_time'])}")
            print(f"  Abandonment Rate: {format_number(summary['abandonment_rate'])}%")
            print(f"  Uploaded Files: {format_file_size(upload_volume(interview.id))}")
            print("  Questions:")
            for q in report['questions']:
                print(f"    - Q{q['order_index']} ({q['type']}): {q['title'][:60]}")
                print(f"      Responses: {q['total_responses']}, "
                      f"Completion: {format_number(q['completion_rate'])}%")
                for label, count in q['response_distribution'].items():
                    print(f"      {label}: {count}")
            print("-------------------------")


if __name__ == "__main__":
    query_database()
