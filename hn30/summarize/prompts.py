"""Prompt template for article summaries."""

SUMMARY_PROMPT = (
    "Summarize the following article in 2-5 concise sentences for a general "
    "audience, focusing on the main outcome. Format with line breaks. Omit "
    "links, references, and introductory phrases.\n\n"
    "Article:\n"
)


def build_summary_prompt(article_text: str) -> str:
    """Build the summary prompt for an article."""
    return SUMMARY_PROMPT + article_text
