"""
Plate Calculator App - Main Application
Barbell plate loading calculator built with Streamlit
"""

import json

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from src.auth import (
    is_supabase_configured, get_current_user, is_authenticated,
    login_with_email, signup_with_email, logout
)
from database.db_manager import (
    init_database, load_user_settings, save_preferences, save_history,
    save_config, save_all_settings, clear_user_settings, get_history_dataframe
)
from utils.calculations import convert_weight, calculate_1rm, get_percentage_table
from utils.gym_configs import (
    Plate, PlateConfigurationError, get_standard_configurations, get_configuration,
    create_custom_configuration, validate_configuration, get_bar_weight
)
from utils.helpers import get_bar_types, get_bar_type_label, get_units, format_weight, format_plate_list
from utils.plate_calculator import (
    calculate_for_configuration, get_weight_progressions, get_plate_visualization
)
from utils.preferences import (
    PlateCalculatorPreferences, PlateCalculatorHistory, update_preferences,
    get_default_configuration, add_calculation_to_history, add_to_favorites,
    remove_from_favorites, clear_history, export_data, import_data
)

# Page configuration
st.set_page_config(
    page_title="Plate Calculator",
    page_icon="🏋️",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Relative plate heights for the bar drawing
PLATE_HEIGHTS = {'large': 1.0, 'medium': 0.75, 'small': 0.5}


# ============================================================================
# STATE
# ============================================================================

def init_plate_state(user_id):
    """Load settings once per session (defaults for guests)"""
    if st.session_state.get("plate_settings_loaded"):
        return

    if user_id:
        preferences, history, config = load_user_settings(user_id)
    else:
        preferences = PlateCalculatorPreferences()
        history = PlateCalculatorHistory()
        config = get_default_configuration(preferences)

    st.session_state.plate_preferences = preferences
    st.session_state.plate_history = history
    st.session_state.plate_config = config
    st.session_state.plate_settings_loaded = True


def _current_user_id():
    user = get_current_user()
    return user['id'] if user else None


def set_preferences(preferences: PlateCalculatorPreferences):
    st.session_state.plate_preferences = preferences
    user_id = _current_user_id()
    if user_id and not save_preferences(user_id, preferences):
        st.warning("偏好設定未能儲存到雲端")


def set_history(history: PlateCalculatorHistory):
    st.session_state.plate_history = history
    user_id = _current_user_id()
    if user_id and not save_history(user_id, history):
        st.warning("歷史紀錄未能儲存到雲端")


def set_config(config):
    st.session_state.plate_config = config
    user_id = _current_user_id()
    if user_id and not save_config(user_id, config):
        st.warning("器材設定未能儲存到雲端")


# ============================================================================
# LOGIN
# ============================================================================

def render_login_page():
    """Render the login/signup page"""
    st.header("🔐 登入")
    st.caption("登入後可將偏好設定、器材設定與計算紀錄同步到雲端")

    tab_login, tab_signup = st.tabs(["登入", "註冊"])

    with tab_login:
        email = st.text_input("Email", key="login_email")
        password = st.text_input("Password", type="password", key="login_password")

        if st.button("登入", type="primary", use_container_width=True):
            if login_with_email(email, password):
                st.session_state.plate_settings_loaded = False
                st.session_state.current_page = "槓片計算"
                st.success("登入成功！")
                st.rerun()

    with tab_signup:
        new_email = st.text_input("Email", key="signup_email")
        new_password = st.text_input("Password", type="password", key="signup_password")
        confirm_password = st.text_input("確認 Password", type="password", key="signup_confirm_password")

        if st.button("註冊", type="primary", use_container_width=True):
            if new_password != confirm_password:
                st.error("密碼不一致")
            elif len(new_password) < 6:
                st.error("密碼長度至少需要 6 個字元")
            elif signup_with_email(new_email, new_password):
                st.session_state.plate_settings_loaded = False
                st.session_state.current_page = "槓片計算"
                st.success("註冊成功！您已自動登入。")
                st.rerun()


# ============================================================================
# PAGE 1: PLATE CALCULATOR (槓片計算)
# ============================================================================

def build_plate_figure(result) -> go.Figure:
    """Draw the loaded bar: left plates, bar, right plates"""
    visualization = get_plate_visualization(result)
    unit = visualization['bar']['unit']

    labels, heights, colors, hover = [], [], [], []
    position = 0

    def add_plate(load):
        nonlocal position
        for _ in range(load.count):
            labels.append(position)
            heights.append(PLATE_HEIGHTS.get(load.size, 0.5))
            colors.append(load.color)
            hover.append(format_weight(load.weight, unit, decimals=2))
            position += 1

    # Left side is drawn outermost first so the heaviest plate sits next to the bar
    for load in reversed(visualization['left_side']):
        add_plate(load)

    labels.append(position)
    heights.append(0.15)
    colors.append('#9CA3AF')
    hover.append(f"Bar {format_weight(visualization['bar']['weight'], unit)}")
    position += 1

    for load in visualization['right_side']:
        add_plate(load)

    fig = go.Figure(go.Bar(
        x=labels,
        y=heights,
        marker_color=colors,
        hovertext=hover,
        hoverinfo="text",
        width=0.9
    ))
    fig.update_layout(
        height=260,
        margin=dict(l=10, r=10, t=10, b=10),
        xaxis=dict(visible=False),
        yaxis=dict(visible=False, range=[0, 1.1]),
        showlegend=False
    )
    return fig


def _select_configuration():
    """Gym configuration picker, returns the chosen configuration"""
    current = st.session_state.plate_config
    configs = get_standard_configurations()
    names = [c.name for c in configs]
    if current.name not in names:
        configs = [current] + configs
        names = [current.name] + names

    selected_name = st.selectbox(
        "器材設定 (Gym)",
        names,
        index=names.index(current.name),
        key="calc_gym_config"
    )
    selected = configs[names.index(selected_name)]
    if selected.name != current.name:
        set_config(selected)
    return selected


def render_calculator_page():
    """Render the Plate Calculator page"""
    st.header("🧮 槓片計算")

    preferences = st.session_state.plate_preferences
    history = st.session_state.plate_history

    col1, col2, col3 = st.columns(3)
    with col1:
        config = _select_configuration()
    with col2:
        bar_types = get_bar_types()
        bar_type = st.selectbox(
            "槓鈴種類 (Bar)",
            bar_types,
            index=bar_types.index(preferences.default_bar_type),
            format_func=lambda b: f"{get_bar_type_label(b)} ({format_weight(get_bar_weight(b, config.unit), config.unit)})",
            key="calc_bar_type"
        )
    unit = config.unit
    bar_weight = get_bar_weight(bar_type, unit)
    with col3:
        default_weight = float(history.recent_weights[0]) if history.recent_weights else float(bar_weight) + 40
        total_weight = st.number_input(
            f"目標總重量 ({unit})",
            min_value=0.0,
            value=default_weight,
            step=2.5 if unit == 'kg' else 5.0,
            key="calc_total_weight"
        )

    other_unit = 'lb' if unit == 'kg' else 'kg'
    st.caption(f"≈ {format_weight(convert_weight(total_weight, unit, other_unit), other_unit)}")

    if not preferences.auto_calculate and not st.button("計算", type="primary"):
        return

    try:
        result = calculate_for_configuration(total_weight, config, bar_type)
    except PlateConfigurationError as e:
        st.error(f"❌ 器材設定有誤: {e}")
        return

    tab_result, tab_progressions, tab_percent = st.tabs(["📋 計算結果", "📈 進階重量", "💯 1RM 百分比"])

    with tab_result:
        if result.is_valid:
            st.success(f"✅ 每邊: {format_plate_list(result.plates_per_side, unit)}")
            if preferences.auto_calculate and (not history.calculations or history.calculations[0].weight != total_weight):
                set_history(add_calculation_to_history(
                    history, total_weight, unit, bar_type,
                    [{'weight': p.weight, 'count': p.count} for p in result.plates_per_side]
                ))
        else:
            st.error(f"❌ {result.error}")
            if result.plates_per_side:
                st.info(f"最接近的組合: {format_plate_list(result.plates_per_side, unit)} "
                        f"(總重 {format_weight(result.loaded_weight, unit, decimals=2)})")

        if result.alternative_weights:
            st.markdown("**可達成的重量:** " + "、".join(
                format_weight(w, unit, decimals=2) for w in result.alternative_weights
            ))

        metric_cols = st.columns(3)
        metric_cols[0].metric("槓鈴", format_weight(result.bar_weight, unit))
        metric_cols[1].metric("每邊槓片", format_weight(result.total_plates_per_side, unit, decimals=2))
        metric_cols[2].metric("槓片總數", sum(p.count for p in result.plates))

        if result.plates_per_side:
            plates_df = pd.DataFrame([
                {
                    '槓片': format_weight(p.weight, unit, decimals=2),
                    '每邊數量': p.count,
                    '每邊重量': format_weight(p.total, unit, decimals=2)
                }
                for p in result.plates_per_side
            ])
            st.dataframe(plates_df, use_container_width=True, hide_index=True)

        if preferences.show_visualization and result.plates_per_side:
            st.plotly_chart(build_plate_figure(result), use_container_width=True)

        if total_weight in history.favorite_weights:
            if st.button("☆ 取消最愛", key="remove_favorite"):
                set_history(remove_from_favorites(st.session_state.plate_history, total_weight))
                st.rerun()
        elif st.button("⭐ 加入最愛", key="add_favorite"):
            set_history(add_to_favorites(st.session_state.plate_history, total_weight))
            st.rerun()

    with tab_progressions:
        if not preferences.show_progressions:
            st.info("進階重量已在設定中關閉")
        elif total_weight > 0:
            rows = []
            for weight in get_weight_progressions(total_weight, unit):
                progression = calculate_for_configuration(weight, config, bar_type)
                rows.append({
                    '重量': format_weight(weight, unit, decimals=2),
                    '每邊槓片': format_plate_list(progression.plates_per_side, unit) if progression.is_valid else '-',
                    '可達成': '✅' if progression.is_valid else '❌'
                })
            st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    with tab_percent:
        c1, c2 = st.columns(2)
        with c1:
            lifted = st.number_input(f"重量 ({unit})", min_value=0.0, value=float(total_weight), key="rm_weight")
        with c2:
            reps = st.number_input("次數", min_value=1, max_value=30, value=5, key="rm_reps")
        one_rm = calculate_1rm(lifted, int(reps))
        st.metric("預估 1RM (Epley)", format_weight(one_rm, unit))

        rows = []
        for entry in get_percentage_table(one_rm):
            loadable = calculate_for_configuration(entry['weight'], config, bar_type)
            suggestion = entry['weight'] if loadable.is_valid else (
                loadable.alternative_weights[0] if loadable.alternative_weights else None
            )
            rows.append({
                '%': f"{entry['percentage']}%",
                '重量': format_weight(entry['weight'], unit),
                '建議上槓重量': format_weight(suggestion, unit, decimals=2) if suggestion is not None else '-'
            })
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


# ============================================================================
# PAGE 2: GYM SETTINGS (器材設定)
# ============================================================================

def render_gym_settings_page():
    """Render the Gym Settings page"""
    st.header("⚙️ 器材設定")

    preferences = st.session_state.plate_preferences
    config = st.session_state.plate_config

    st.subheader("偏好設定")
    c1, c2, c3 = st.columns(3)
    with c1:
        units = get_units()
        default_unit = st.selectbox("預設單位", units, index=units.index(preferences.default_unit))
    with c2:
        bar_types = get_bar_types()
        default_bar_type = st.selectbox(
            "預設槓鈴", bar_types,
            index=bar_types.index(preferences.default_bar_type),
            format_func=get_bar_type_label
        )
    with c3:
        config_names = [c.name for c in get_standard_configurations()]
        default_gym_config = st.selectbox(
            "預設器材",
            config_names,
            index=config_names.index(preferences.default_gym_config)
            if preferences.default_gym_config in config_names else 0
        )

    show_visualization = st.checkbox("顯示槓片圖示", value=preferences.show_visualization)
    show_progressions = st.checkbox("顯示進階重量", value=preferences.show_progressions)
    auto_calculate = st.checkbox("自動計算並記錄", value=preferences.auto_calculate)

    if st.button("💾 儲存偏好設定", type="primary"):
        set_preferences(update_preferences(
            preferences,
            default_unit=default_unit,
            default_bar_type=default_bar_type,
            default_gym_config=default_gym_config,
            show_visualization=show_visualization,
            show_progressions=show_progressions,
            auto_calculate=auto_calculate
        ))
        st.success("已儲存")

    st.markdown("---")
    st.subheader("自訂器材")
    st.caption(f"目前使用: **{config.name}**")

    name = st.text_input("名稱", value=config.name if get_configuration(config.name) is None else "My Gym")
    description = st.text_input("描述", value=config.description or "")
    c1, c2 = st.columns(2)
    with c1:
        unit = st.selectbox("單位", get_units(), index=get_units().index(config.unit), key="custom_unit")
    with c2:
        # The calculator always uses the bar chosen on the calculator page
        bar_weight = get_bar_weight(preferences.default_bar_type, unit)
        st.number_input(
            f"槓鈴重量 ({unit})", value=float(bar_weight), disabled=True,
            help="依計算頁選擇的槓鈴種類決定"
        )

    plates_df = pd.DataFrame([
        {'weight': p.weight, 'count': p.count, 'color': p.color, 'size': p.size}
        for p in config.plates
    ], columns=['weight', 'count', 'color', 'size'])
    edited = st.data_editor(
        plates_df,
        num_rows="dynamic",
        use_container_width=True,
        column_config={
            'weight': st.column_config.NumberColumn("槓片重量", min_value=0.0, step=0.25),
            'count': st.column_config.NumberColumn("每邊上限 (空白 = 無限)", min_value=0, step=1),
            'color': st.column_config.TextColumn("顏色"),
            'size': st.column_config.SelectboxColumn("尺寸", options=['small', 'medium', 'large'])
        },
        key="custom_plates_editor"
    )

    if st.button("💾 儲存自訂器材", type="primary"):
        plates = []
        for _, row in edited.dropna(subset=['weight']).iterrows():
            plates.append(Plate(
                weight=float(row['weight']),
                color=row['color'] if isinstance(row['color'], str) and row['color'] else '#6B7280',
                size=row['size'] if row['size'] in PLATE_HEIGHTS else 'small',
                count=None if pd.isna(row['count']) else int(row['count'])
            ))

        custom = create_custom_configuration(name, plates, bar_weight, unit, description or None)
        is_valid, errors = validate_configuration(custom)
        if not is_valid:
            for error in errors:
                st.error(f"❌ {error}")
        else:
            set_config(custom)
            st.success(f"✅ 已儲存 {custom.name}")


# ============================================================================
# PAGE 3: HISTORY (計算紀錄)
# ============================================================================

def render_history_page():
    """Render the History page"""
    st.header("🕘 計算紀錄")

    history = st.session_state.plate_history
    unit = st.session_state.plate_config.unit

    c1, c2 = st.columns(2)
    with c1:
        st.subheader("⭐ 最愛重量")
        if history.favorite_weights:
            for weight in history.favorite_weights:
                col_w, col_b = st.columns([3, 1])
                col_w.write(format_weight(weight, unit, decimals=2))
                if col_b.button("移除", key=f"fav_remove_{weight}"):
                    set_history(remove_from_favorites(history, weight))
                    st.rerun()
        else:
            st.info("尚無最愛重量")
    with c2:
        st.subheader("🕑 最近使用")
        if history.recent_weights:
            st.write("、".join(format_weight(w, unit, decimals=2) for w in history.recent_weights))
        else:
            st.info("尚無紀錄")

    st.subheader("📜 紀錄")
    history_df = get_history_dataframe(history)
    if history_df.empty:
        st.info("尚無計算紀錄")
    else:
        st.dataframe(history_df, use_container_width=True, hide_index=True)
        if st.button("🗑️ 清除紀錄 (保留最愛)"):
            set_history(clear_history(history))
            st.rerun()

    st.markdown("---")
    st.subheader("📦 匯出 / 匯入")
    exported = export_data(st.session_state.plate_preferences, history, st.session_state.plate_config)
    st.download_button(
        "⬇️ 匯出 JSON",
        data=json.dumps(exported, ensure_ascii=False, indent=2),
        file_name="plate_calculator_export.json",
        mime="application/json"
    )

    uploaded_file = st.file_uploader("匯入 JSON", type=['json'])
    if uploaded_file is not None and st.button("⬆️ 匯入"):
        try:
            data = json.load(uploaded_file)
            preferences, history, config = import_data(
                data,
                st.session_state.plate_preferences,
                st.session_state.plate_history,
                st.session_state.plate_config
            )
        except (ValueError, KeyError, TypeError, PlateConfigurationError) as e:
            st.error(f"❌ 匯入失敗: {e}")
        else:
            st.session_state.plate_preferences = preferences
            st.session_state.plate_history = history
            st.session_state.plate_config = config
            user_id = _current_user_id()
            if user_id:
                save_all_settings(user_id, preferences, history, config)
            st.success("✅ 匯入完成")
            st.rerun()

    user_id = _current_user_id()
    if user_id:
        st.markdown("---")
        st.subheader("☁️ 雲端設定")
        if st.button("🗑️ 刪除雲端設定"):
            if clear_user_settings(user_id):
                st.session_state.plate_settings_loaded = False
                st.success("✅ 已刪除雲端設定")
                st.rerun()
            else:
                st.error("❌ 刪除雲端設定失敗")


def main():
    """Main application entry point"""
    cloud_enabled = is_supabase_configured()

    if cloud_enabled and 'db_initialized' not in st.session_state:
        init_database()
        st.session_state.db_initialized = True

    user = get_current_user() if cloud_enabled else None
    init_plate_state(user['id'] if user else None)

    # Sidebar navigation
    st.sidebar.title("🏋️ Plate Calculator")

    if user:
        st.sidebar.markdown(f"**使用者:** {user.get('email', 'Unknown')}")
        if st.sidebar.button("登出", use_container_width=True):
            logout()
            st.rerun()
    else:
        st.sidebar.markdown("**訪客模式** (設定只保留在此次瀏覽)")

    st.sidebar.markdown("---")
    st.sidebar.markdown("### 📍 導航")

    if 'current_page' not in st.session_state:
        st.session_state.current_page = "槓片計算"

    pages = {
        "槓片計算": "🧮",
        "器材設定": "⚙️",
        "計算紀錄": "🕘"
    }
    if cloud_enabled and not is_authenticated():
        pages["登入"] = "🔐"

    for page_name, icon in pages.items():
        is_active = st.session_state.current_page == page_name
        if st.sidebar.button(
            f"{icon} {page_name}",
            key=f"nav_{page_name}",
            use_container_width=True,
            type="primary" if is_active else "secondary"
        ):
            st.session_state.current_page = page_name
            st.rerun()

    page = st.session_state.current_page

    if page == "槓片計算":
        render_calculator_page()
    elif page == "器材設定":
        render_gym_settings_page()
    elif page == "計算紀錄":
        render_history_page()
    elif page == "登入":
        render_login_page()

    st.sidebar.markdown("---")
    st.sidebar.markdown("**Plate Calculator** v1.0")
    st.sidebar.markdown("算好每一片，專心每一下 💪")


if __name__ == "__main__":
    main()
