"""English Learning Hub: AI-generated quizzes with a progression engine."""
