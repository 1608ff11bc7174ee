"""
Campus-to-Corporate Placement Prep Portal
Student placement-preparation backend with LLM-assisted grading.

Architecture:
- MongoDB: users (students, alumni, admin), weekly content, weekly tasks,
  submissions, placement experiences
- LLM judge (OpenAI-compatible): coding-question evaluation only
- FastAPI: HTTP surface, JWT auth
"""

__version__ = "1.0.0"
