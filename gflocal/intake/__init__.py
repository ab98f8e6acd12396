"""
Request intake.

Responsibilities:
- Accept "request new listing" form submissions from the hosting platform.
- Relay them as a repository-dispatch event that starts the research job.
"""
