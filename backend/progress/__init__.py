"""PhD progress domain: meetings, publications, courses, exams and stored files."""
