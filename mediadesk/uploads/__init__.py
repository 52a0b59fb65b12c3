"""Staging and uploading media batches."""
