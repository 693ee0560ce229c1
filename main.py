"""
This is the main entry point for the AyurCare Streamlit application.

This script handles the following key responsibilities:
- Sets the overall page configuration for the Streamlit app.
- Loads the application configuration and configures logging.
- Initializes the shared `RecordService` (encrypted patient records) and the
  `AnalysisDispatcher` (AI-generated Ayurvedic analysis).
- Hands control to the GUI router, which renders the page held in the session state.
"""
# ayurcare/main.py

import streamlit as st

from ayurcare.analysis import AnalysisDispatcher
from ayurcare.config import configure_logging, load_config
from ayurcare.encryption import load_or_create_encryptor
from ayurcare.records import RecordService
import gui

# Set the basic configuration for the Streamlit page.
st.set_page_config(
    page_title="AyurCare",
    layout="wide"
)


@st.cache_resource
def get_config():
    """Loads the configuration once per server process and configures logging."""
    config = load_config()
    configure_logging(config.log_level)
    return config


# Service Initialization
@st.cache_resource
def get_record_service(data_file, key_file):
    """
    Initializes and returns the shared RecordService instance.

    This function is decorated with `@st.cache_resource` so the record store is
    loaded only once and kept across app reruns.

    Returns:
        RecordService: The singleton instance of the record store.
    """
    return RecordService(data_file=data_file, encryptor=load_or_create_encryptor(key_file))


@st.cache_resource
def get_dispatcher(_config):
    """Returns the shared AnalysisDispatcher for the configured AI backend."""
    return AnalysisDispatcher(_config)


config = get_config()
service = get_record_service(config.data_file, config.key_file)
dispatcher = get_dispatcher(config)

# Session State Management
if 'page' not in st.session_state:
    st.session_state.page = None
if 'selected_patient_id' not in st.session_state:
    st.session_state.selected_patient_id = None

# Main App Router
gui.show_main_app(service, dispatcher)
