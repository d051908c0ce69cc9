"""Streamlit back-office: dishes, option groups, categories, tables and the order board."""

from decimal import Decimal

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from qrmenu.schemas.menu import CategoryCreate, DishCreate, OptionCreate, OptionGroupCreate
from qrmenu.services import menu_service
from qrmenu.services.order_service import advance_order_status, list_orders, serialize_order
from qrmenu.services.order_status import STATUS_LABELS, StatusTransitionError
from qrmenu.services.restaurant_service import get_or_create_default_restaurant
from qrmenu.services.table_service import DuplicateTableError, create_table, list_tables, toggle_table_active
from qrmenu.utils.money import format_eur
from streamlit_app.common import get_session, now_string

st.set_page_config(page_title="Back-office", layout="wide")
st.title("Back-office")
st.caption(f"Last refresh: {now_string()}")

with get_session() as db:
    restaurant = get_or_create_default_restaurant(db)
    orders_tab, dishes_tab, options_tab, tables_tab = st.tabs(["Orders", "Dishes", "Options", "Tables"])

    with orders_tab:
        st.subheader("Open orders")
        for order in (serialize_order(row) for row in list_orders(db, restaurant.id)):
            if order.next_action is None:
                continue
            with st.container(border=True):
                st.markdown(
                    f"**#{order.id}** · Table {order.table_number} · {STATUS_LABELS[order.status]} · {format_eur(order.total)}"
                )
                for item in order.items:
                    options = ", ".join(option.option_name for option in item.options_selected)
                    st.write(f"{item.quantity} × {item.dish_name}" + (f" ({options})" if options else ""))
                    if item.comment:
                        st.caption(item.comment)
                if st.button(order.next_action.label, key=f"advance_{order.id}"):
                    try:
                        advance_order_status(db, order.id, order.status, restaurant_id=restaurant.id)
                    except StatusTransitionError as exc:
                        st.warning(str(exc))
                    except SQLAlchemyError:
                        st.error("Status could not be saved. Please try again.")
                    else:
                        st.rerun()

    with dishes_tab:
        st.subheader("Categories")
        with st.form("new_category"):
            category_name = st.text_input("Category name")
            category_emoji = st.text_input("Emoji (optional)")
            category_order = st.number_input("Display order", min_value=0, step=1, value=0)
            if st.form_submit_button("Add category") and category_name:
                menu_service.create_category(
                    db,
                    restaurant.id,
                    CategoryCreate(name=category_name, emoji=category_emoji or None, display_order=int(category_order)),
                )
                st.success("Category added")

        categories = menu_service.list_categories(db, restaurant.id)
        st.write([{"id": c.id, "name": c.name, "emoji": c.emoji, "order": c.display_order} for c in categories])

        st.subheader("Dishes")
        with st.form("new_dish"):
            dish_name = st.text_input("Dish name")
            dish_desc = st.text_input("Description")
            dish_price = st.number_input("Price", min_value=0.0, value=10.0, step=0.5, format="%.2f")
            category_names = [c.name for c in categories]
            dish_category = st.selectbox("Category", category_names) if category_names else st.text_input("Category")
            dish_image = st.text_input("Image URL (optional)")
            if st.form_submit_button("Save dish") and dish_name and dish_category:
                menu_service.create_dish(
                    db,
                    restaurant.id,
                    DishCreate(
                        name=dish_name,
                        description=dish_desc or None,
                        price=Decimal(str(dish_price)),
                        category=dish_category,
                        image_url=dish_image or None,
                    ),
                )
                st.success("Dish added")

        for dish in menu_service.list_dishes(db, restaurant.id):
            columns = st.columns([4, 2, 2, 1])
            columns[0].write(f"{dish.name} ({dish.category})")
            columns[1].write(format_eur(dish.price))
            available = columns[2].toggle("Available", value=dish.is_available, key=f"available_{dish.id}")
            if available != dish.is_available:
                menu_service.set_dish_availability(db, dish, available)
                st.rerun()
            if columns[3].button("Delete", key=f"delete_dish_{dish.id}"):
                menu_service.delete_dish(db, dish)
                st.rerun()

    with options_tab:
        dishes = menu_service.list_dishes(db, restaurant.id)
        dish_map = {f"{d.name} (#{d.id})": d for d in dishes}
        st.subheader("New option group")
        with st.form("new_group"):
            scope = st.radio("Attach to", ["Dish", "Category"], horizontal=True)
            target_label = st.selectbox("Dish", list(dish_map.keys())) if dish_map else None
            target_category = st.text_input("Category name")
            group_name = st.text_input("Group name")
            is_required = st.checkbox("Required")
            allow_multiple = st.checkbox("Allow several choices")
            group_order = st.number_input("Display order", min_value=0, step=1, value=0, key="group_order")
            if st.form_submit_button("Add group") and group_name:
                if scope == "Dish" and target_label:
                    payload = OptionGroupCreate(
                        dish_id=dish_map[target_label].id,
                        name=group_name,
                        is_required=is_required,
                        allow_multiple=allow_multiple,
                        display_order=int(group_order),
                    )
                elif scope == "Category" and target_category:
                    payload = OptionGroupCreate(
                        category=target_category,
                        name=group_name,
                        is_required=is_required,
                        allow_multiple=allow_multiple,
                        display_order=int(group_order),
                    )
                else:
                    payload = None
                    st.warning("Pick a dish or type a category.")
                if payload is not None:
                    menu_service.create_option_group(db, payload)
                    st.success("Group added")

        st.subheader("Groups")
        for dish in dishes:
            for group in menu_service.load_option_groups(db, dish):
                if group.dish_id != dish.id:
                    continue
                with st.expander(f"{dish.name} · {group.name}"):
                    for option in group.options:
                        st.write(f"{option.name} ({format_eur(option.price_modifier)})")
                    with st.form(f"new_option_{group.id}"):
                        option_name = st.text_input("Option name", key=f"option_name_{group.id}")
                        option_price = st.number_input(
                            "Price modifier", value=0.0, step=0.5, format="%.2f", key=f"option_price_{group.id}"
                        )
                        if st.form_submit_button("Add option") and option_name:
                            menu_service.create_option(
                                db,
                                OptionCreate(
                                    option_group_id=group.id,
                                    name=option_name,
                                    price_modifier=Decimal(str(option_price)),
                                    display_order=len(group.options),
                                ),
                            )
                            st.rerun()

    with tables_tab:
        st.subheader("Tables")
        with st.form("new_table"):
            table_number = st.number_input("Table number", min_value=1, step=1, value=1)
            if st.form_submit_button("Add table"):
                try:
                    table = create_table(db, restaurant.id, int(table_number))
                    st.success(f"Table {table.table_number} added, QR code data: {table.qr_code_data}")
                except DuplicateTableError as exc:
                    st.warning(str(exc))

        for table in list_tables(db, restaurant.id):
            columns = st.columns([2, 3, 2])
            columns[0].write(f"Table {table.table_number}")
            columns[1].code(f"/t/{table.qr_code_data}")
            if columns[2].button("Deactivate" if table.is_active else "Activate", key=f"table_{table.id}"):
                toggle_table_active(db, table)
                st.rerun()
