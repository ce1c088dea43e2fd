# app.py
"""
MRC Sales Dashboard - Main Entry Point

Login screen, then the seller landing page: own YTD / MTD, recent sales
and links to the dashboards the signed-in role may open.

Version: 1.0.0
"""

import streamlit as st
from datetime import date
import logging

from netspark_sales.auth import AuthManager
from netspark_sales.config import config
from netspark_sales.firestore import check_firestore_connection
from netspark_sales.mrc_performance import (
    AccessControl,
    SalesQueries,
    DataLoadError,
    MRCMetrics,
    format_currency,
)
from netspark_sales.mrc_performance.constants import RECENT_SALES_LIMIT

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "NetSpark Sales"
APP_ICON = "📶"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=f"{APP_NAME} - MRC Dashboard",
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #ff6f32;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .welcome-box {
        background: linear-gradient(135deg, #ff6f32 0%, #4a90e2 100%);
        color: white;
        padding: 2rem;
        border-radius: 0.75rem;
        margin-bottom: 2rem;
    }

    .welcome-title {
        font-size: 1.75rem;
        font-weight: 600;
        margin-bottom: 0.5rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== INITIALIZATION ====================

auth = AuthManager()

DASHBOARD_LINKS = {
    'team': ("pages/1_📊_Team_Dashboard.py", "Team Dashboard", "📊"),
    'management': ("pages/2_🧭_Management_Dashboard.py", "Management Dashboard", "🧭"),
    'executive': ("pages/3_💼_Executive_Dashboard.py", "Executive Dashboard", "💼"),
}

# ==================== HELPER FUNCTIONS ====================

def show_login_page():
    """Display the login page"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Monthly Recurring Charge Performance</p>', unsafe_allow_html=True)

    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        with st.form("login_form", clear_on_submit=False):
            st.markdown("#### 🔐 Login")

            email = st.text_input(
                "Email",
                placeholder="first.last@netsparktelecom.com",
                key="login_email"
            )
            password = st.text_input(
                "Password",
                type="password",
                placeholder="Enter your password",
                key="login_password"
            )

            submit = st.form_submit_button(
                "🔑 Login",
                type="primary",
                use_container_width=True
            )

            if submit:
                with st.spinner("Authenticating..."):
                    success, result = auth.authenticate(email, password)

                if success:
                    auth.login(result)
                    st.success("✅ Login successful!")
                    st.rerun()
                else:
                    st.error(result.get("error", "Authentication failed"))

        with st.expander("ℹ️ Need Help?"):
            st.info(f"""
            - Sign in with your {config.get_access_config()['allowed_domain']} account
            - Your email must be verified before you can sign in
            - Session expires after {config.get_app_setting('SESSION_TIMEOUT_HOURS', 8)} hours
            """)


def show_sidebar(access: AccessControl):
    with st.sidebar:
        st.markdown(f"### 👤 {auth.get_user_display_name()}")

        if access.can_view_executive():
            st.success("🔓 Executive Access")
        elif access.can_view_management():
            st.info("👥 Management Access")
        else:
            st.warning("👤 Seller Access")

        st.caption(f"Role: {access.user_role}")
        st.markdown("---")

        if st.button("🚪 Logout", use_container_width=True):
            auth.logout()
            st.rerun()


def show_landing_page():
    """Seller landing page after login"""
    access = AccessControl(
        user_role=st.session_state.get('user_role'),
        user_email=st.session_state.get('user_email')
    )
    show_sidebar(access)

    st.markdown(f"""
    <div class="welcome-box">
        <div class="welcome-title">Welcome, {auth.get_user_display_name()}! 👋</div>
        <div>Here's a summary of your sales performance.</div>
    </div>
    """, unsafe_allow_html=True)

    # Navigation
    nav_cols = st.columns(len(DASHBOARD_LINKS))
    for col, page in zip(nav_cols, access.get_navigation()):
        path, label, icon = DASHBOARD_LINKS[page]
        with col:
            st.page_link(path, label=label, icon=icon)

    # Own sales
    fs_ok, fs_error = check_firestore_connection()
    if not fs_ok:
        st.error(f"⚠️ {fs_error}")
        return

    queries = SalesQueries(access, config.get_firebase_config()['collection'])
    try:
        sales_df = queries.get_sales_frame()
    except DataLoadError as e:
        st.error(str(e))
        return

    own_df = access.filter_own_sales(sales_df)
    overview = MRCMetrics(own_df).calculate_overview_metrics(date.today())

    col1, col2 = st.columns(2)
    with col1:
        st.metric("YTD MRC", format_currency(overview['ytd']))
    with col2:
        st.metric("MTD MRC", format_currency(overview['mtd']))

    st.markdown("### 🧾 Recent Sales")
    if own_df.empty:
        st.info("No sales found for you (yet)!")
    else:
        recent = own_df.iloc[::-1].head(RECENT_SALES_LIMIT)
        st.dataframe(
            {
                'Month': recent['month'],
                'MRC': recent['effective_mrc'].apply(format_currency),
                'Type': recent['type'],
                'Customer': recent['customer'].replace('', '-'),
            },
            hide_index=True,
            use_container_width=True
        )

    st.markdown(f"""
    <div class="footer">
        <strong>{APP_NAME}</strong> v{APP_VERSION} | Upgrades count as $15.00 MRC
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

def main():
    """Main application entry point"""
    if not auth.check_session():
        show_login_page()
    else:
        show_landing_page()


if __name__ == "__main__":
    main()
