"""
Player self-registration FSM handler.

Flow:
  /register → full name → name with initials → FIDE ID (or skip)
            → date of birth (age category derived) → gender → contact number
            → confirm → submitting → saved ✅ | failed (answers kept, retry)
"""
import logging
from datetime import date

from aiogram import F, Router
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import BufferedInputFile, CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession

from chessreg.config import settings
from chessreg.errors import GENERIC_FORM_ERROR, BotDetected, FormValidationError, PersistenceError
from chessreg.formatting import field_error_lines, md, payment_instructions, registration_summary
from chessreg.keyboards import (
    MainMenuCb, RegistrationCb,
    back_to_main, cancel_registration_kb, confirm_registration_kb, gender_kb,
    registration_success_kb, retry_registration_kb, skip_fide_kb,
)
from chessreg.middlewares.auth_middleware import reset_flow
from chessreg.models.models import AgeCategory
from chessreg.services import derive_age_category, generate_qr_png, submit_registration, ticket_payload
from chessreg.states import RegistrationStates
from chessreg.validators import (
    check_contact_number, check_fide_id, check_full_name, check_gender,
    check_name_with_initials, parse_date_of_birth,
)

logger = logging.getLogger(__name__)
router = Router(name="registration")

FORM_FIELDS = (
    "full_name", "name_with_initials", "fide_id", "date_of_birth",
    "gender", "contact_number",
)

ASK_FULL_NAME = (
    "♟ *Tournament Registration* — {season}\n\n"
    "Enter the player's *full name*:"
)


async def _flag_automation(message: Message, state: FSMContext) -> None:
    """Answers relayed by an inline bot or sent from a bot account fill the honeypot."""
    if message.via_bot or (message.from_user and message.from_user.is_bot):
        await state.update_data(honeypot="automated")


# ── Entry: /register, "Register" button, "Register another player" ───────────

@router.message(Command("register"))
async def cmd_register(message: Message, state: FSMContext) -> None:
    await reset_flow(state)
    await state.set_state(RegistrationStates.enter_full_name)
    await message.answer(
        ASK_FULL_NAME.format(season=md(settings.TOURNAMENT_SEASON)),
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=cancel_registration_kb(),
    )


@router.callback_query(MainMenuCb.filter(F.action == "register"))
@router.callback_query(RegistrationCb.filter(F.action == "another"))
async def cq_start_registration(callback: CallbackQuery, state: FSMContext) -> None:
    await reset_flow(state)
    await state.set_state(RegistrationStates.enter_full_name)
    await callback.message.edit_text(
        ASK_FULL_NAME.format(season=md(settings.TOURNAMENT_SEASON)),
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=cancel_registration_kb(),
    )
    await callback.answer()


# ── Step 1: full name ─────────────────────────────────────────────────────────

@router.message(RegistrationStates.enter_full_name)
async def msg_full_name(message: Message, state: FSMContext) -> None:
    await _flag_automation(message, state)
    try:
        name = check_full_name(message.text)
    except ValueError as e:
        await message.answer(f"⚠️ {e}", reply_markup=cancel_registration_kb())
        return

    await state.update_data(full_name=name)
    await state.set_state(RegistrationStates.enter_name_with_initials)
    await message.answer(
        f"👤 *{md(name)}*\n\nEnter the *name with initials* (e.g. _A.B. Perera_):",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=cancel_registration_kb(),
    )


# ── Step 2: name with initials ────────────────────────────────────────────────

@router.message(RegistrationStates.enter_name_with_initials)
async def msg_name_with_initials(message: Message, state: FSMContext) -> None:
    await _flag_automation(message, state)
    try:
        name = check_name_with_initials(message.text)
    except ValueError as e:
        await message.answer(f"⚠️ {e}", reply_markup=cancel_registration_kb())
        return

    await state.update_data(name_with_initials=name)
    await state.set_state(RegistrationStates.enter_fide_id)
    await message.answer(
        "♟ Enter the player's *FIDE ID* if they have one:",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=skip_fide_kb(),
    )


# ── Step 3: FIDE ID (optional) ────────────────────────────────────────────────

_ASK_DOB = "🎂 Enter the *date of birth* as `DD/MM/YYYY`:"


@router.message(RegistrationStates.enter_fide_id)
async def msg_fide_id(message: Message, state: FSMContext) -> None:
    await _flag_automation(message, state)
    try:
        fide_id = check_fide_id(message.text)
    except ValueError as e:
        await message.answer(f"⚠️ {e}", reply_markup=skip_fide_kb())
        return

    await state.update_data(fide_id=fide_id)
    await state.set_state(RegistrationStates.enter_date_of_birth)
    await message.answer(_ASK_DOB, parse_mode=ParseMode.MARKDOWN, reply_markup=cancel_registration_kb())


@router.callback_query(RegistrationCb.filter(F.action == "skip_fide"), RegistrationStates.enter_fide_id)
async def cq_skip_fide(callback: CallbackQuery, state: FSMContext) -> None:
    await state.update_data(fide_id=None)
    await state.set_state(RegistrationStates.enter_date_of_birth)
    await callback.message.edit_text(
        _ASK_DOB, parse_mode=ParseMode.MARKDOWN, reply_markup=cancel_registration_kb()
    )
    await callback.answer()


# ── Step 4: date of birth → derived age category ─────────────────────────────

@router.message(RegistrationStates.enter_date_of_birth)
async def msg_date_of_birth(message: Message, state: FSMContext) -> None:
    await _flag_automation(message, state)
    try:
        dob = parse_date_of_birth(message.text)
    except ValueError as e:
        await message.answer(f"⚠️ {e}", reply_markup=cancel_registration_kb())
        return

    age_category = derive_age_category(dob)
    await state.update_data(date_of_birth=dob.isoformat())
    await state.set_state(RegistrationStates.choose_gender)
    await message.answer(
        f"🎂 Born: `{dob.strftime('%d/%m/%Y')}`\n"
        f"🏅 Age category: *{AgeCategory.LABELS[age_category]}* _(from birth year)_\n\n"
        f"Select the player's *gender*:",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=gender_kb(),
    )


# ── Step 5: gender ────────────────────────────────────────────────────────────

@router.callback_query(RegistrationCb.filter(F.action == "gender"), RegistrationStates.choose_gender)
async def cq_gender(callback: CallbackQuery, callback_data: RegistrationCb, state: FSMContext) -> None:
    try:
        gender = check_gender(callback_data.value)
    except ValueError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await state.update_data(gender=gender)
    await state.set_state(RegistrationStates.enter_contact_number)
    await callback.message.edit_text(
        f"🚻 Gender: *{md(gender)}*\n\n"
        f"📞 Enter a *contact number* (e.g. `077 123 4567` or `+94771234567`):",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=cancel_registration_kb(),
    )
    await callback.answer()


@router.message(RegistrationStates.choose_gender)
async def msg_gender_hint(message: Message) -> None:
    """Catch accidental text input during the gender selection step."""
    await message.answer("👆 Please choose one of the buttons:", reply_markup=gender_kb())


# ── Step 6: contact number → summary ─────────────────────────────────────────

@router.message(RegistrationStates.enter_contact_number)
async def msg_contact_number(message: Message, state: FSMContext) -> None:
    await _flag_automation(message, state)
    try:
        phone = check_contact_number(message.text)
    except ValueError as e:
        await message.answer(f"⚠️ {e}", reply_markup=cancel_registration_kb())
        return

    await state.update_data(contact_number=phone)
    await state.set_state(RegistrationStates.confirm)
    data = await state.get_data()
    await message.answer(
        _confirm_text(data),
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=confirm_registration_kb(),
    )


def _confirm_text(data: dict) -> str:
    age_category = derive_age_category(date.fromisoformat(data["date_of_birth"]))
    return (
        "📝 *Check the registration:*\n\n"
        f"{registration_summary(data, age_category)}\n\n"
        f"{payment_instructions()}\n\n"
        "_Tap confirm to declare that the details above are correct._"
    )


# ── Step 7: confirm / retry ───────────────────────────────────────────────────

@router.callback_query(
    RegistrationCb.filter(F.action.in_(("confirm", "retry"))),
    RegistrationStates.confirm,
)
async def cq_confirm_registration(
    callback: CallbackQuery,
    session: AsyncSession,
    state: FSMContext,
) -> None:
    await state.set_state(RegistrationStates.submitting)
    await callback.answer("⏳ Submitting registration…")

    data = await state.get_data()
    raw = {name: data.get(name) for name in FORM_FIELDS}
    raw["agree_to_terms"] = True
    raw["honeypot"] = data.get("honeypot", "")

    try:
        player = await submit_registration(session, raw)
    except BotDetected:
        logger.warning("Honeypot tripped by user %s", callback.from_user.id)
        await reset_flow(state)
        await callback.message.edit_text(f"⚠️ {GENERIC_FORM_ERROR}", reply_markup=back_to_main())
        return
    except FormValidationError as exc:
        await state.set_state(RegistrationStates.confirm)
        await callback.message.edit_text(
            "⚠️ *Please fix the following:*\n\n" + field_error_lines(exc.errors),
            parse_mode=ParseMode.MARKDOWN,
            reply_markup=retry_registration_kb(),
        )
        return
    except PersistenceError as exc:
        logger.warning("Registration for user %s not saved: %s", callback.from_user.id, exc)
        # Answers stay in FSM data so "Try again" resubmits them unchanged
        await state.set_state(RegistrationStates.confirm)
        await callback.message.answer(
            "❌ *Registration Failed*\n\n"
            "There was an error submitting your registration. Please try again.",
            parse_mode=ParseMode.MARKDOWN,
            reply_markup=retry_registration_kb(),
        )
        return

    await reset_flow(state)

    contact_line = f"For any questions, contact: {md(settings.CONTACT_PHONE)}"
    group_line = "Join our WhatsApp group for updates.\n" if settings.WHATSAPP_GROUP_URL else ""
    text = (
        f"🎉 *Registration Successful!*\n\n"
        f"*Registration Summary*\n"
        f"👤 Name: {md(player.full_name)}\n"
        f"🏅 Category: {player.age_category}\n"
        f"📞 Contact: `{player.contact_number}`\n\n"
        f"🧾 Reference: `{player.reference_number}`\n"
        f"_Quote this reference with your payment._\n\n"
        f"Thank you for registering! {group_line}"
        f"{contact_line}"
    )
    await callback.message.edit_text(
        text,
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=registration_success_kb(settings.WHATSAPP_GROUP_URL),
    )

    # Send QR ticket as a separate photo message
    try:
        png = generate_qr_png(ticket_payload(player.reference_number, player.full_name))
        await callback.message.answer_photo(
            photo=BufferedInputFile(png, filename=f"{player.reference_number}.png"),
            caption=f"🎫 `{player.reference_number}` · {md(player.full_name)}",
            parse_mode=ParseMode.MARKDOWN,
        )
    except TelegramAPIError as exc:
        logger.warning("Failed to send QR ticket: %s", exc)


@router.callback_query(RegistrationCb.filter(F.action == "edit"), RegistrationStates.confirm)
async def cq_edit_registration(callback: CallbackQuery, state: FSMContext) -> None:
    """Go back to the first step; later answers are overwritten as they are re-entered."""
    await state.set_state(RegistrationStates.enter_full_name)
    await callback.message.edit_text(
        "✏️ Enter the player's *full name* again:",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=cancel_registration_kb(),
    )
    await callback.answer()


# ── In-flight guard ───────────────────────────────────────────────────────────

@router.callback_query(RegistrationStates.submitting)
async def cq_submitting(callback: CallbackQuery) -> None:
    await callback.answer("⏳ Submitting registration…")


@router.message(RegistrationStates.submitting)
async def msg_submitting(message: Message) -> None:
    await message.answer("⏳ Submitting registration…")


@router.callback_query(RegistrationCb.filter(F.action.in_(("confirm", "retry"))))
async def cq_confirm_after_submit(callback: CallbackQuery) -> None:
    """A second confirm tap queued behind the first one finds the flow already closed."""
    await callback.answer("✅ Already handled. Send /register for a new player.")
