"""Receipt OCR post-processing: record extraction, similarity, merge and formatting."""
