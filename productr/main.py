#!/usr/bin/env python3
# productr/main.py
"""
Консоль администратора каталога: вход по коду и управление продуктами
"""

import asyncio
import logging
from typing import Optional

from productr.core.config import settings
from productr.core.exceptions import NetworkError, ProductrError, ValidationError
from productr.core.http import create_client
from productr.forms.login_form import LoginForm
from productr.forms.product_form import ProductForm
from productr.schemas.auth import User
from productr.schemas.product import EXCHANGE_CHOICES, PRODUCT_TYPES
from productr.schemas.product_image import BinaryFile, RemoteSlot
from productr.services.auth import SessionGateway
from productr.services.image_service import ImageFetcher
from productr.services.products import ProductGateway
from productr.utils.text_utils import describe_product
from productr.views.catalog import CatalogView, HomeView, ProductsView, Tab


def ask(prompt: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    value = input(f"{prompt}{suffix}: ").strip()
    return value or default


async def login_flow(form: LoginForm) -> Optional[User]:
    print("=== Login to your Productr Account ===")

    while not form.show_otp:
        raw = ask("Email or Phone number")
        try:
            if not await form.submit_identifier(raw):
                print(f"❌ {form.error or 'Login failed'}")
        except ProductrError as e:
            print(f"❌ {e}")

    print(f"OTP sent to {form.identifier}")
    while True:
        code = ask("Enter OTP (r - resend, q - quit)")
        if code == "q":
            return None
        if code == "r":
            try:
                if await form.resend():
                    print("✅ OTP sent again")
                else:
                    print(f"Resend available in {form.timer.remaining}s")
            except ProductrError as e:
                print(f"❌ {e}")
            continue

        form.otp.clear()
        form.paste_otp(code)
        try:
            user = await form.submit_otp()
        except ProductrError as e:
            print(f"❌ {e}")
            continue
        if user:
            return user
        print(f"❌ {form.error}")


def print_images(form: ProductForm) -> None:
    slots = form.images.display_sequence
    if not slots:
        print("  (no images)")
    for index, slot in enumerate(slots):
        if isinstance(slot, RemoteSlot):
            print(f"  {index}. {slot.url}")
        else:
            print(f"  {index}. {slot.file.name} (new)")


def edit_images(form: ProductForm) -> None:
    while True:
        print("Images:")
        print_images(form)
        action = ask("a <path...> - add, d <index> - remove, Enter - done")
        if not action:
            return
        command, _, rest = action.partition(" ")
        try:
            if command == "a":
                form.add_files([BinaryFile.from_path(p) for p in rest.split()])
            elif command == "d":
                form.remove_image(int(rest))
            else:
                print("Unknown command")
        except (OSError, ValueError, IndexError) as e:
            print(f"❌ {e}")


def fill_form(form: ProductForm) -> None:
    state = form.state
    form.set_field("name", ask("Product Name", state.name))
    print("Types: " + ", ".join(PRODUCT_TYPES))
    form.set_field("type", ask("Product Type", state.type))
    form.set_field("quantity_stock", ask("Quantity Stock", str(state.quantity_stock)))
    form.set_field("mrp", ask("MRP", str(state.mrp)))
    form.set_field("selling_price", ask("Selling Price", str(state.selling_price)))
    form.set_field("brand_name", ask("Brand Name", state.brand_name))
    exchange = ask("Exchange or return eligibility (yes/no)", state.exchange_or_return)
    form.set_field("exchange_or_return", exchange if exchange in EXCHANGE_CHOICES else "yes")
    edit_images(form)


async def run_form(view: CatalogView) -> None:
    form = view.form
    while form.is_open:
        fill_form(form)
        try:
            print(f"✅ {await view.save_form()}")
        except ValidationError as e:
            print(f"❌ {e}")
        except NetworkError:
            print(f"❌ {form.errors.get('submit')}")
            if ask("Retry? (y/N)").lower() != "y":
                form.close()


def pick(view: CatalogView):
    if not view.products:
        print("No products")
        return None
    try:
        return view.products[int(ask("Product #")) - 1]
    except (ValueError, IndexError):
        print("❌ No such product")
        return None


def print_products(view: CatalogView) -> None:
    if not view.products:
        print("Feels a little empty over here...")
    for number, product in enumerate(view.products, start=1):
        status = "published" if product.is_published else "unpublished"
        lines = describe_product(product)
        print(f"#{number} {lines[0]} ({status})")
        for line in lines[1:]:
            print(line)


async def catalog_menu(home: HomeView, products: ProductsView) -> bool:
    """Возвращает False, когда пользователь вышел из аккаунта"""
    view: CatalogView = home
    await home.refresh()

    while True:
        title = f"Home / {home.active_tab.value}" if view is home else "Products"
        print(f"\n=== {title} ===")
        print_products(view)
        choice = ask("[h]ome [t]ab [p]roducts [a]dd [e]dit p[u]blish [d]elete [l]ogout [q]uit")

        try:
            if choice == "h":
                view = home
                await home.refresh()
            elif choice == "t":
                other = Tab.UNPUBLISHED if home.active_tab == Tab.PUBLISHED else Tab.PUBLISHED
                view = home
                await home.switch_tab(other)
            elif choice == "p":
                view = products
                await products.refresh()
            elif choice == "a":
                products.form.open_create()
                await run_form(products)
            elif choice == "e":
                product = pick(view)
                if product:
                    view.form.open_edit(product)
                    await run_form(view)
            elif choice == "u":
                product = pick(view)
                if product:
                    print(f"✅ {await view.toggle_published(product)}")
            elif choice == "d":
                product = pick(view)
                if product and ask(f"Delete '{product.name}'? (y/N)").lower() == "y":
                    print(f"✅ {await view.delete(product)}")
            elif choice == "l":
                return False
            elif choice == "q":
                return True
        except NetworkError as e:
            print(f"❌ {e.message}")


async def main() -> None:
    async with create_client(settings) as client:
        session = SessionGateway(client, settings)
        gateway = ProductGateway(client)
        fetcher = ImageFetcher(client)

        while True:
            user = session.current_user()
            if user is None:
                user = await login_flow(LoginForm(session))
                if user is None:
                    return
            print(f"Logged in as {user.email or user.phone or user.name or 'user'}")

            done = await catalog_menu(HomeView(gateway, fetcher), ProductsView(gateway, fetcher))
            if done:
                return
            session.logout()


def run() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format="[%(levelname)s] %(message)s")
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, EOFError):
        print("\nCancelled")


if __name__ == "__main__":
    run()
