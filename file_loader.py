"""
Helper module to read the inventory CSV from either disk or a Streamlit upload.
"""
import os

import pandas as pd
import streamlit as st


def get_file_source(file_key: str, file_path=None):
    """
    Returns a file-like object or path for reading a CSV.

    Priority:
    1. If an upload is stored in session_state.uploaded_files[file_key], use that buffer
    2. Otherwise, use file_path when it points at an existing file

    Args:
        file_key: key in st.session_state.uploaded_files (e.g., 'inventory')
        file_path: fallback file path (optional)

    Returns:
        tuple: (source, is_uploaded) where source is file-like, a path, or None
    """
    try:
        uploaded_files = st.session_state.get('uploaded_files', {})
    except (AttributeError, RuntimeError):
        # Running outside a Streamlit script context
        uploaded_files = {}

    if file_key and file_key in uploaded_files:
        return uploaded_files[file_key], True
    if file_path is not None and not isinstance(file_path, str):
        # Already a buffer (BytesIO, StringIO, UploadedFile)
        return file_path, True
    if file_path and os.path.isfile(os.path.abspath(file_path)):
        return file_path, False
    return None, False


def safe_read_csv(file_key: str, file_path=None, **kwargs):
    """
    Read a CSV from an uploaded buffer or from disk.

    Uploaded buffers are rewound first because Streamlit reruns the script
    and the same UploadedFile may already have been consumed.

    Args:
        file_key: key in st.session_state.uploaded_files
        file_path: fallback file path, or a buffer
        **kwargs: passed to pd.read_csv()

    Returns:
        pd.DataFrame

    Raises:
        FileNotFoundError: when neither an upload nor the file exists
    """
    source, is_uploaded = get_file_source(file_key, file_path)

    if source is None:
        raise FileNotFoundError(f"File not found: {file_path} (and no uploaded file)")

    if is_uploaded and hasattr(source, 'seek'):
        source.seek(0)

    return pd.read_csv(source, **kwargs)
