"""
Configuration for Web Novel Chapter Translator

Central settings for the API client, translation retry policy,
chapter extraction thresholds, page fetching and logging
"""

import logging

# API settings
API_CONFIG = {
    'model': "claude-sonnet-4-5",
    'max_tokens': 4096,
    'temperature': 0.3,
    'api_key_env': "ANTHROPIC_API_KEY",
}

# Translation settings
TRANSLATION_CONFIG = {
    'source_language': "English",
    'target_language': "Burmese",
    'max_words': 400,         # Word budget for a single translation call
    'min_words': 5,           # Fewer words than this is "insufficient content"
    'max_retries': 3,         # Attempts beyond the first
    'initial_delay': 2.0,     # Seconds before the first retry, doubled afterwards
    'deadline': None,         # Optional overall seconds across all attempts
    'batch_concurrency': 3,
}

# Chapter extraction settings
EXTRACTION_CONFIG = {
    'primary_content_id': "chr-content",
    'min_content_length': 100,    # Cleaned body must be longer than this
    'by_id_chunk_size': 50000,
    'tag_strip_passes': 3,
    'placeholder_title': "Chapter",
    'preview_length': 200,
    'strip_tags': ["script", "style", "noscript", "iframe", "ins",
                   "aside", "nav", "header", "footer", "form"],
}

# Page fetching settings
FETCH_CONFIG = {
    'timeout': 30,
    'user_agent': ("Mozilla/5.0 (iPhone; CPU iPhone OS 18_0 like Mac OS X) "
                   "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/18.0 "
                   "Mobile/15E148 Safari/604.1"),
}

# Logging settings
LOGGING_CONFIG = {
    'level': logging.INFO,
    'format': "%(asctime)s - %(levelname)s - %(message)s",
    'datefmt': "%H:%M:%S",
    'log_file_suffix': "translation_log",
    'quiet_loggers': ("httpx", "httpcore", "anthropic"),
}
