"""
Streamlit UI for the shop dashboard.

Features:
- Home tab with product / item / order counts
- Products tab: add with dynamic variants, All / Attar / Perfume views,
  inline edit, attar & perfume PDF + CSV downloads
- Others tab: buying / selling price and profit
- Orders tab: add, search, delete, receipt download
"""
from datetime import datetime

import pandas as pd
import streamlit as st

from scent_tool.config.settings import configure_logging, get_settings
from scent_tool.engine import PricingEngine
from scent_tool.services.records_service import RecordValidationError, ShopStores
from scent_tool.services.price_list_service import (
    VIEW_MODES, attar_price_frame, filter_products, format_price, perfume_price_frame, variant_editor_frame,
)
from scent_tool.services.pdf_export import (
    build_attar_price_list, build_order_receipt, build_perfume_price_list,
)


st.set_page_config(
    page_title="Shop Dashboard",
    layout="wide",
    initial_sidebar_state="collapsed"
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    configure_logging()
    return PricingEngine()


@st.cache_resource
def get_stores():
    """Get cached record stores."""
    return ShopStores.from_settings(get_settings())


try:
    engine = get_engine()
    stores = get_stores()
    settings = get_settings()
except (OSError, ValueError) as e:
    st.error(f"System Error: {e}")
    st.stop()


# Which record is being edited inline; presentation state only
for key in ('editing_product_id', 'editing_other_id'):
    if key not in st.session_state:
        st.session_state[key] = None
if 'variant_rows' not in st.session_state:
    st.session_state.variant_rows = 1


def show_errors(e: RecordValidationError):
    for name, message in e.errors.items():
        st.error(f"{name}: {message}")


st.title(f"🧴 {settings.shop_name}")
st.caption(f"v1.0 | {datetime.now().strftime('%Y-%m-%d')}")

tab_home, tab_products, tab_others, tab_orders = st.tabs(["🏠 Home", "🧴 Products", "📦 Others", "🧾 Orders"])


# ============================================================================
# TAB 1: HOME
# ============================================================================
with tab_home:
    st.subheader("Welcome Back, Shop Owner")
    counts = stores.counts()
    c1, c2, c3 = st.columns(3)
    c1.metric("Perfume Products", counts['products'])
    c2.metric("Other Products", counts['others'])
    c3.metric("Total Orders", counts['orders'])


# ============================================================================
# TAB 2: PRODUCTS
# ============================================================================
with tab_products:
    with st.container(border=True):
        st.markdown("##### ➕ Add Product")
        c1, c2 = st.columns(2)
        name = c1.text_input("Product Name", placeholder="e.g., Oud Al Khaleeji", key="new_product_name")
        description = c2.text_area("Description (optional)", key="new_product_description")

        st.caption('Variants (Attar) - use sizes like "3ml", "6ml", "12ml ( Tola )"')
        variants = []
        for i in range(st.session_state.variant_rows):
            v1, v2 = st.columns(2)
            size = v1.text_input("Size", key=f"variant_size_{i}", placeholder="Size (e.g., 3ml)")
            price = v2.text_input("Price", key=f"variant_price_{i}", placeholder="Price")
            variants.append({'size': size, 'price': price})

        b1, b2, b3 = st.columns([1, 1, 4])
        if b1.button("➕ Add Variant"):
            st.session_state.variant_rows += 1
            st.rerun()
        if b2.button("➖ Remove Variant", disabled=st.session_state.variant_rows <= 1):
            st.session_state.variant_rows -= 1
            st.rerun()
        if b3.button("Add Product", type="primary"):
            try:
                stores.products.create_record({'name': name, 'description': description, 'variants': variants})
                st.session_state.variant_rows = 1
                st.toast("Product added successfully!")
                st.rerun()
            except RecordValidationError as e:
                show_errors(e)

    c1, c2 = st.columns([2, 1])
    search = c1.text_input("Search products", placeholder="Search by name...", label_visibility="collapsed")
    view_mode = c2.radio("View", VIEW_MODES, horizontal=True, format_func=str.title, label_visibility="collapsed")

    products = filter_products(stores.products.list_records(), engine, search, view_mode)

    # Downloads
    d1, d2, d3, d4 = st.columns(4)
    d1.download_button(
        "🖨️ Attar Price List (PDF)",
        data=build_attar_price_list(products, settings),
        file_name="Attar-Price-List.pdf",
        mime="application/pdf",
        use_container_width=True,
    )
    d2.download_button(
        "🖨️ Perfume Price List (PDF)",
        data=build_perfume_price_list(products, engine, settings),
        file_name="Perfume-Price-List.pdf",
        mime="application/pdf",
        use_container_width=True,
    )
    d3.download_button(
        "📥 Attar CSV",
        data=attar_price_frame(products).to_csv(index=False),
        file_name="attar_prices.csv",
        mime="text/csv",
        use_container_width=True,
    )
    d4.download_button(
        "📥 Perfume CSV",
        data=perfume_price_frame(products, engine).to_csv(index=False),
        file_name="perfume_prices.csv",
        mime="text/csv",
        use_container_width=True,
    )

    if not products:
        st.info("No products yet")

    for product in products:
        with st.container(border=True):
            if st.session_state.editing_product_id == product.record_id:
                new_name = st.text_input("Name", value=product.name, key=f"edit_name_{product.record_id}")
                new_description = st.text_area("Description", value=product.description or "",
                                               key=f"edit_desc_{product.record_id}")
                edited = st.data_editor(
                    variant_editor_frame(product.variants),
                    num_rows="dynamic",
                    hide_index=True,
                    key=f"edit_variants_{product.record_id}",
                )
                s1, s2 = st.columns([1, 6])
                if s1.button("💾 Save", key=f"save_{product.record_id}"):
                    try:
                        stores.products.update_record(product.record_id, {
                            'name': new_name,
                            'description': new_description,
                            'variants': edited.to_dict(orient='records'),
                        })
                        st.session_state.editing_product_id = None
                        st.toast("Product updated!")
                        st.rerun()
                    except RecordValidationError as e:
                        show_errors(e)
                if s2.button("✖ Cancel", key=f"cancel_{product.record_id}"):
                    st.session_state.editing_product_id = None
                    st.rerun()
                continue

            h1, h2, h3 = st.columns([6, 1, 1])
            h1.markdown(f"**{product.name}**")
            if product.description:
                h1.caption(product.description)
            if h2.button("✏️", key=f"edit_{product.record_id}"):
                st.session_state.editing_product_id = product.record_id
                st.rerun()
            if h3.button("🗑️", key=f"delete_{product.record_id}"):
                stores.products.delete_record(product.record_id)
                st.rerun()

            left, right = st.columns(2)
            if view_mode in ('all', 'attar'):
                left.dataframe(
                    pd.DataFrame([{'Size': v.get('size'), 'Price': format_price(v.get('price'), settings.currency)}
                                  for v in product.variants]),
                    hide_index=True, use_container_width=True,
                )
            if view_mode in ('all', 'perfume'):
                derived = engine.derive_for_product(product)
                target = right if view_mode == 'all' else left
                if derived.has_data:
                    target.dataframe(
                        pd.DataFrame([{'Perfume Size': s.label, 'Price': format_price(s.price, settings.currency)}
                                      for s in derived.slots]),
                        hide_index=True, use_container_width=True,
                    )
                else:
                    target.caption("No perfume prices (needs a 3ml or 12ml ( Tola ) price)")


# ============================================================================
# TAB 3: OTHERS
# ============================================================================
with tab_others:
    with st.form("add_other", clear_on_submit=True):
        st.markdown("##### ➕ Add Item")
        c1, c2, c3, c4 = st.columns(4)
        other_name = c1.text_input("Name")
        buying = c2.text_input("Buying Price")
        selling = c3.text_input("Selling Price")
        profit = c4.text_input("Profit (optional)")
        if st.form_submit_button("Add Item", type="primary"):
            try:
                stores.others.create_record({
                    'name': other_name, 'buyingPrice': buying, 'sellingPrice': selling, 'profit': profit,
                })
                st.toast("Item added!")
            except RecordValidationError as e:
                show_errors(e)

    other_search = st.text_input("Search items", placeholder="Search by name...", label_visibility="collapsed")
    items = stores.others.search(other_search)
    if not items:
        st.info("No items yet")

    for item in items:
        with st.container(border=True):
            if st.session_state.editing_other_id == item.record_id:
                e1, e2, e3, e4 = st.columns(4)
                values = {
                    'name': e1.text_input("Name", value=item.name, key=f"oname_{item.record_id}"),
                    'buyingPrice': e2.text_input("Buying", value=str(item.buying_price), key=f"obuy_{item.record_id}"),
                    'sellingPrice': e3.text_input("Selling", value=str(item.selling_price), key=f"osell_{item.record_id}"),
                    'profit': e4.text_input("Profit", value=str(item.profit if item.profit is not None else ""),
                                            key=f"oprofit_{item.record_id}"),
                }
                s1, s2 = st.columns([1, 6])
                if s1.button("💾 Save", key=f"osave_{item.record_id}"):
                    try:
                        stores.others.update_record(item.record_id, values)
                        st.session_state.editing_other_id = None
                        st.toast("Item updated!")
                        st.rerun()
                    except RecordValidationError as e:
                        show_errors(e)
                if s2.button("✖ Cancel", key=f"ocancel_{item.record_id}"):
                    st.session_state.editing_other_id = None
                    st.rerun()
                continue

            r1, r2, r3, r4, r5, r6 = st.columns([3, 2, 2, 2, 1, 1])
            r1.markdown(f"**{item.name}**")
            r2.write(f"Buy: {format_price(item.buying_price, settings.currency)}")
            r3.write(f"Sell: {format_price(item.selling_price, settings.currency)}")
            r4.write(f"Profit: {format_price(item.profit, settings.currency)}")
            if r5.button("✏️", key=f"oedit_{item.record_id}"):
                st.session_state.editing_other_id = item.record_id
                st.rerun()
            if r6.button("🗑️", key=f"odelete_{item.record_id}"):
                stores.others.delete_record(item.record_id)
                st.toast("Item deleted")
                st.rerun()


# ============================================================================
# TAB 4: ORDERS
# ============================================================================
with tab_orders:
    with st.form("add_order", clear_on_submit=True):
        st.markdown("##### ➕ New Order")
        c1, c2, c3, c4 = st.columns(4)
        product_name = c1.text_input("Product Name")
        product_price = c2.text_input("Product Price")
        remaining = c3.text_input("Remaining Payment")
        payment_method = c4.text_input("Payment Method")
        order_description = st.text_area("Description")
        if st.form_submit_button("Save Order", type="primary"):
            try:
                stores.orders.create_record({
                    'productName': product_name,
                    'productPrice': product_price,
                    'remainingPayment': remaining,
                    'paymentMethod': payment_method,
                    'description': order_description,
                })
                st.toast("Order saved successfully!")
            except RecordValidationError as e:
                show_errors(e)

    order_search = st.text_input("Search orders", placeholder="Product or payment method...",
                                 label_visibility="collapsed")
    orders = stores.orders.search(order_search)
    if not orders:
        st.info("No orders yet")

    for order in orders:
        with st.container(border=True):
            r1, r2, r3, r4, r5, r6 = st.columns([3, 2, 2, 2, 1, 1])
            r1.markdown(f"**{order.product_name}**")
            if order.description:
                r1.caption(order.description)
            r2.write(format_price(order.product_price, settings.currency))
            r3.write(f"Remaining: {format_price(order.remaining_payment, settings.currency)}")
            r4.write(order.payment_method or "-")
            r5.download_button(
                "🖨️",
                data=build_order_receipt(order, settings),
                file_name=f"receipt-{order.record_id}.pdf",
                mime="application/pdf",
                key=f"receipt_{order.record_id}",
            )
            if r6.button("🗑️", key=f"delete_order_{order.record_id}"):
                stores.orders.delete_record(order.record_id)
                st.toast("Order deleted")
                st.rerun()
