import logging

import streamlit as st

from chat_session import ChatSession
from config import settings
from relay_client import RelayClient
from rendering import format_cost, model_options, render_message

# --- Page Configuration ---
st.set_page_config(page_title=settings.page_title, page_icon="💬")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def get_session() -> ChatSession:
    # session_state はタブごとに独立し、再読み込みで破棄される
    if "chat" not in st.session_state:
        client = RelayClient(settings.relay_base_url, timeout=settings.request_timeout)
        st.session_state.chat = ChatSession(client.chat, model=settings.default_model)
    return st.session_state.chat


def main_program():
    session = get_session()

    # --- Cost & Model ---
    col1, col2 = st.columns([2, 1])
    with col1:
        st.caption(f"Request Cost: {format_cost(session.current_cost)}")
        st.caption(f"Total Cost per session: {format_cost(session.total_cost)}")
    with col2:
        labels = model_options(session.model)
        options = list(labels)
        selected = st.selectbox(
            "Model",
            options,
            index=options.index(session.model),
            format_func=lambda m: labels.get(m, m),
            disabled=session.busy,
        )
        if selected != session.model:
            session.select_model(selected)

    # --- Chat UI ---
    for message in session.messages:
        rendered = render_message(message)
        with st.chat_message(rendered.role):
            st.markdown(rendered.label)
            if rendered.markdown:
                st.markdown(rendered.body)
            else:
                st.text(rendered.body)

    if session.error:
        st.error(session.error, icon="🔥")

    prompt = st.chat_input(
        "Type your message... (Shift+Enter for new line)", disabled=session.busy
    )
    if prompt:
        with st.chat_message("user"):
            st.markdown(prompt)
        with st.spinner("Loading...", show_time=True):
            session.submit(prompt)
        st.rerun()


st.title(settings.page_title)
main_program()
