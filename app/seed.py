"""Initial campus pages loaded into an empty knowledge base on first startup."""
import logging

from app.storage import Storage

logger = logging.getLogger(__name__)

SEED_PAGES = [
    {
        "url": "https://www.mitsgwalior.ac.in/about",
        "title": "About MITS - Madhav Institute of Technology & Science",
        "content": (
            "Madhav Institute of Technology & Science (MITS), Gwalior, is a premier technical "
            "institution established in 1984. MITS is affiliated to Rajiv Gandhi Proudyogiki "
            "Vishwavidyalaya (RGPV), Bhopal and approved by AICTE, New Delhi.\n\n"
            "The institute offers undergraduate (B.Tech) programs in Computer Science & Engineering, "
            "Electronics & Communication Engineering, Mechanical Engineering, Civil Engineering, and "
            "Electrical Engineering. It also offers postgraduate (M.Tech) programs in various "
            "specializations.\n\n"
            "MITS has modern laboratories, a library with over 50,000 books and journals, classrooms "
            "with ICT facilities, and sports infrastructure. The campus is spread over 42 acres with "
            "hostels for both boys and girls."
        ),
    },
    {
        "url": "https://www.mitsgwalior.ac.in/admissions",
        "title": "Admissions - MITS Gwalior",
        "content": (
            "MITS Gwalior offers admissions to B.Tech and M.Tech programs.\n\n"
            "B.Tech Admission Process:\n"
            "1. Candidates must have passed 10+2 with Physics, Chemistry, and Mathematics with minimum "
            "50% marks (45% for SC/ST)\n"
            "2. Valid JEE Main score is required\n"
            "3. Admissions are through MP DTE (Directorate of Technical Education) counseling\n"
            "4. Fill the online application form during the counseling period\n"
            "5. Attend document verification and counseling as per schedule\n"
            "6. Pay the admission fee to confirm your seat\n\n"
            "Important Documents Required: 10th and 12th mark sheets, JEE Main scorecard, transfer "
            "certificate, category certificate (if applicable), domicile certificate, Aadhar card and "
            "photographs.\n\n"
            "M.Tech Admission: Admissions are based on GATE scores through MP DTE counseling.\n\n"
            "Contact Admission Cell: Phone 0751-2409201, Email admissions@mitsgwalior.in\n\n"
            "Important Dates: Application Period June-July, Counseling July-August, Classes Begin August."
        ),
    },
    {
        "url": "https://www.mitsgwalior.ac.in/departments",
        "title": "Departments and Courses - MITS",
        "content": (
            "MITS offers the following undergraduate (B.Tech) programs:\n"
            "1. Computer Science & Engineering (CSE): programming, algorithms, database systems, AI, "
            "machine learning. 120 seats per year.\n"
            "2. Electronics & Communication Engineering (ECE): digital electronics, VLSI, embedded "
            "systems, communication systems. 60 seats per year.\n"
            "3. Mechanical Engineering (ME): thermodynamics, manufacturing, CAD/CAM, robotics. "
            "90 seats per year.\n"
            "4. Civil Engineering (CE): structural, environmental and transportation engineering. "
            "60 seats per year.\n"
            "5. Electrical Engineering (EE): power systems, control systems, electrical machines. "
            "60 seats per year.\n\n"
            "M.Tech programs: Computer Science & Engineering, Electronics & Communication Engineering, "
            "Mechanical Engineering (Design, Thermal), Digital Communication, Power Systems."
        ),
    },
    {
        "url": "https://www.mitsgwalior.ac.in/facilities",
        "title": "Campus Facilities - MITS Gwalior",
        "content": (
            "Library: central library with over 50,000 books and 200+ journals, digital library with "
            "e-resources, reading rooms for 300 students, open 8 AM to 8 PM on weekdays.\n\n"
            "Laboratories: computer labs with 500+ systems, specialized labs for each department, "
            "research labs for M.Tech students.\n\n"
            "Hostels: separate hostels for boys and girls with capacity for 800 students, 24/7 "
            "security, mess facility, Wi-Fi enabled rooms.\n\n"
            "Sports: football and cricket grounds, basketball and volleyball courts, indoor badminton "
            "hall.\n\n"
            "Other: health center, bus facility from major city points, bank ATM, cafeteria, "
            "auditorium with 500 seats."
        ),
    },
    {
        "url": "https://www.mitsgwalior.ac.in/contact",
        "title": "Contact Information - MITS Gwalior",
        "content": (
            "Madhav Institute of Technology & Science (MITS)\n"
            "Gola Ka Mandir, Gwalior - 474005, Madhya Pradesh, India\n\n"
            "Main Office: +91-751-2409201, 2409202\n"
            "Admission Office: +91-751-2409203\n"
            "Placement Cell: +91-751-2409204\n\n"
            "General Enquiries: info@mitsgwalior.in\n"
            "Admissions: admissions@mitsgwalior.in\n"
            "Placements: placements@mitsgwalior.in\n\n"
            "Office Hours: Monday to Friday 9:00 AM - 5:00 PM, Saturday 9:00 AM - 1:00 PM, "
            "Sunday closed.\n\n"
            "How to Reach: Gwalior Airport is 12 km from campus, Gwalior Railway Station 6 km."
        ),
    },
    {
        "url": "https://www.mitsgwalior.ac.in/placements",
        "title": "Placements and Career - MITS Gwalior",
        "content": (
            "MITS has a strong placement record with companies recruiting from campus every year.\n\n"
            "Top Recruiters: TCS, Infosys, Wipro, Accenture, Cognizant, Amazon, Microsoft, L&T, "
            "Tata Motors, Deloitte.\n\n"
            "Placement Process: pre-placement training from 3rd year, resume building and mock "
            "interviews, aptitude and technical training, on-campus drives throughout final year.\n\n"
            "For placement enquiries: placements@mitsgwalior.in, +91-751-2409204."
        ),
    },
]


def seed_initial_content(storage: Storage) -> int:
    """Insert SEED_PAGES when the store is empty. Returns the number of pages added."""
    try:
        if storage.list_content():
            logger.info("Content already seeded, skipping")
            return 0

        for page in SEED_PAGES:
            storage.save_content(page["url"], page["title"], page["content"])
            logger.info("Seeded: %s", page["title"])
        return len(SEED_PAGES)
    except Exception:
        logger.exception("Error seeding content")
        return 0
