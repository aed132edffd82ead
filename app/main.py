"""
Streamlit Frontend for Budget Assistant

The user talks to the assistant in plain language ("I spent $50 on
groceries") and the assistant keeps the ledger through its tools.

DESIGN PRINCIPLES:
1. One chat page; everything else is secondary
2. Quick stats come from the ledger directly, never from the LLM
3. Clear error messages in simple language
4. Clearing memory is an explicit action

Run with:
    streamlit run app/main.py
"""

import asyncio
from datetime import date

import streamlit as st

from budget_assistant.config import validate_all_settings
from budget_assistant.orchestrator import (
    QUICK_ACTIONS,
    BudgetAssistant,
    create_app_components,
)


# Page configuration
st.set_page_config(
    page_title="Budget Assistant",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Full-width sidebar buttons
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
</style>
""", unsafe_allow_html=True)


EXAMPLE_COMMANDS = [
    "Add $50 expense for groceries to Food category",
    "Create a $300 budget for Transportation",
    "I received $3000 salary today",
    "Show me my Food category spending this month",
    "Set up a $200 Entertainment budget with 75% alert",
    "How much have I spent so far?",
    "Add another $20 to that category",
    "What was my budget for that again?",
]


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_assistant() -> BudgetAssistant:
    """Get or create application components (cached)."""
    return create_app_components()


def format_currency(amount) -> str:
    return f"${amount:,.2f}"


def main():
    """Main application entry point."""
    try:
        assistant = get_assistant()
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        st.info("Check your `.env` file (see the Settings page for what is missing).")
        render_settings_page()
        return

    # Sidebar navigation
    st.sidebar.title("💰 Budget Assistant")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["💬 Chat", "🛠️ Tools", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    render_quick_stats(assistant)
    st.sidebar.markdown("---")
    render_quick_actions(assistant)

    # Route to appropriate page
    if page == "💬 Chat":
        render_chat_page(assistant)
    elif page == "🛠️ Tools":
        render_tools_page(assistant)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_quick_stats(assistant: BudgetAssistant):
    """Sidebar totals for the current month."""
    today = date.today()
    summary = assistant.totals(today.year, today.month)

    st.sidebar.markdown(f"### 📊 {today.strftime('%B %Y')}")
    st.sidebar.metric("Income", format_currency(summary.total_income))
    st.sidebar.metric("Expenses", format_currency(summary.total_expenses))
    st.sidebar.metric("Net", format_currency(summary.net_amount))

    if st.sidebar.button("🔄 Refresh Stats"):
        st.rerun()


def render_quick_actions(assistant: BudgetAssistant):
    """Sidebar shortcuts that go through the same chat path as typed messages."""
    st.sidebar.markdown("### ⚡ Quick Actions")
    for label, prompt in QUICK_ACTIONS.items():
        if st.sidebar.button(label):
            with st.spinner("Thinking..."):
                run_async(assistant.chat(prompt))
            st.rerun()


def render_chat_page(assistant: BudgetAssistant):
    """Render the chat page."""
    st.title("💬 Chat with your budget")

    col1, col2 = st.columns([3, 1])

    with col2:
        st.markdown("### 💡 Example Commands")
        for command in EXAMPLE_COMMANDS:
            st.caption(f'"{command}"')

        st.markdown("### 💬 Conversation Memory")
        st.caption(
            'Say "I spent $50 on groceries", then "Add another $25 to that" '
            "and the assistant will know what you mean."
        )

        if st.button("🗑️ Clear Memory"):
            result = assistant.clear_memory()
            if "error" in result:
                st.error(result["error"])
            else:
                st.success(result["message"])
                st.rerun()

    with col1:
        for turn in assistant.history():
            with st.chat_message(turn["role"]):
                st.markdown(turn["content"])

        prompt = st.chat_input("Tell me about your spending...")
        if prompt:
            with st.chat_message("user"):
                st.markdown(prompt)

            with st.spinner("Thinking..."):
                response = run_async(assistant.chat(prompt))

            with st.chat_message(response.role.value):
                st.markdown(response.content)


def render_tools_page(assistant: BudgetAssistant):
    """Render the tools overview page."""
    st.title("🛠️ Tools")

    st.info(assistant.tools_status())

    overview = assistant.tools_overview()
    if overview.get("status") == "error":
        st.error(f"❌ {overview.get('error', 'Unknown error')}")
        return

    st.markdown(
        f"**{overview['totalTools']} tools** available at "
        f"`{overview['mcpEndpoint']}`"
    )

    for tool in overview["tools"]:
        with st.expander(f"🔧 {tool['name']}"):
            st.markdown(tool["description"])
            st.json(tool["inputSchema"])


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Database (Ledger)", "database"),
        ("Google Sheets (Ledger, optional)", "google_sheets"),
        ("Gemini (AI)", "gemini"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your API keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
